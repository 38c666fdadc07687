"""Vietnamese province and administrative unit data service."""

__version__ = "0.1.0"
