"""Signature feature exceptions."""
from __future__ import annotations


class SignatureError(Exception):
    """Base exception for the signature feature."""


class FileSaveError(SignatureError):
    """Raised when an exported artifact cannot be written."""


class AdvisoryError(SignatureError):
    """Raised when the advisory text service fails or answers garbage."""
