"""KYC document field extraction and verification status service."""

__version__ = "1.0.0"
