import pytest

_ENV_VARS = (
    "ETSY_API_KEY",
    "ETSY_TOKEN",
    "ETSY_SHOP_ID",
    "ETSY_API_BASE",
    "PRINTFUL_API_KEY",
    "PRINTFUL_BASE_URL",
    "WEBSITE_OUTPUT_DIR",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test without real credentials and away from any local .env."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
