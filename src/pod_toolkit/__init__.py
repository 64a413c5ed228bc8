"""pod-toolkit: publish print-on-demand products to any sales channel."""

__version__ = "1.0.0"
