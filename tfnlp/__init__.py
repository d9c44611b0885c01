"""Generate, check, format and security-scan Terraform configurations from natural language."""

__version__ = "1.0.0"