"""standctl — stand-sales back office client."""

__version__ = "0.1.0"
