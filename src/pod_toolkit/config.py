"""Environment-backed configuration for channels and providers.

Settings are read once per command with pydantic-settings (``.env`` is
honoured) and turned into a frozen ``Config`` that is passed explicitly to
whichever channel or provider needs it.
"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ETSY_API_BASE = "https://openapi.etsy.com/v3"
DEFAULT_PRINTFUL_BASE_URL = "https://api.printful.com"
DEFAULT_WEBSITE_OUTPUT_DIR = "./products"


class ConfigurationError(ValueError):
    """Required settings for a channel or provider are missing."""


class Settings(BaseSettings):
    """Raw settings loaded from environment variables."""

    # Etsy sales channel
    etsy_api_key: str = ""
    etsy_token: str = ""
    etsy_shop_id: str = ""
    etsy_api_base: str = DEFAULT_ETSY_API_BASE

    # Printful print provider
    printful_api_key: str = ""
    printful_base_url: str = DEFAULT_PRINTFUL_BASE_URL

    # Website sales channel
    website_output_dir: str = ""

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@dataclass(frozen=True)
class EtsyConfig:
    api_key: str
    token: str
    shop_id: str
    base_url: str = DEFAULT_ETSY_API_BASE


@dataclass(frozen=True)
class PrintfulConfig:
    api_key: str
    base_url: str = DEFAULT_PRINTFUL_BASE_URL


@dataclass(frozen=True)
class WebsiteConfig:
    output_dir: str = DEFAULT_WEBSITE_OUTPUT_DIR


@dataclass(frozen=True)
class Config:
    """Per-run configuration. Only the sections that are set are present."""

    etsy: Optional[EtsyConfig] = None
    printful: Optional[PrintfulConfig] = None
    website: WebsiteConfig = field(default_factory=WebsiteConfig)
    log_level: str = "WARNING"


def get_config(settings: Settings | None = None) -> Config:
    """Build the run configuration from environment settings.

    The Etsy section only exists when ETSY_API_KEY is set and the Printful
    section only when PRINTFUL_API_KEY is set; the website section always
    exists.
    """
    s = settings or Settings()

    etsy = None
    if s.etsy_api_key:
        etsy = EtsyConfig(
            api_key=s.etsy_api_key,
            token=s.etsy_token,
            shop_id=s.etsy_shop_id,
            base_url=s.etsy_api_base or DEFAULT_ETSY_API_BASE,
        )

    printful = None
    if s.printful_api_key:
        printful = PrintfulConfig(
            api_key=s.printful_api_key,
            base_url=s.printful_base_url or DEFAULT_PRINTFUL_BASE_URL,
        )

    website = WebsiteConfig(output_dir=s.website_output_dir or DEFAULT_WEBSITE_OUTPUT_DIR)

    return Config(etsy=etsy, printful=printful, website=website, log_level=s.log_level)


def missing_channel_config(config: Config, channel: str) -> list[str]:
    """Return the environment variables a channel or provider still needs."""
    missing: list[str] = []
    if channel == "etsy":
        etsy = config.etsy
        if not (etsy and etsy.api_key):
            missing.append("ETSY_API_KEY")
        if not (etsy and etsy.token):
            missing.append("ETSY_TOKEN")
        if not (etsy and etsy.shop_id):
            missing.append("ETSY_SHOP_ID")
    elif channel == "printful":
        if not (config.printful and config.printful.api_key):
            missing.append("PRINTFUL_API_KEY")
    # website needs no credentials
    return missing


def validate_channel_config(config: Config, channel: str) -> None:
    """Fail fast when a channel or provider is missing required settings.

    Raises:
        ConfigurationError: Naming every missing variable.
    """
    missing = missing_channel_config(config, channel)
    if missing:
        raise ConfigurationError(
            f"Missing required {channel.capitalize()} configuration: {', '.join(missing)}\n"
            "Please set these in your .env file"
        )
