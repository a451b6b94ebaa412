"""Logging helpers."""

from .logger import SecretsRedactionFilter, mask_secret, setup_logger

__all__ = ["SecretsRedactionFilter", "mask_secret", "setup_logger"]
