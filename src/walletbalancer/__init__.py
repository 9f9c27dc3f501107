"""Cross-wallet token redistribution."""

__version__ = "0.1.0"
