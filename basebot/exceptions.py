#!/usr/bin/env python3
"""
BASEBOT - Custom Exception Hierarchy

Structured error types for precise error handling.
"""


class BasebotError(Exception):
    """Base exception for all BASEBOT errors."""

    pass


class ConfigError(BasebotError):
    """Invalid or missing configuration."""

    pass


class DecryptionError(BasebotError):
    """Ciphertext could not be authenticated with the configured key."""

    pass


class WalletError(BasebotError):
    """Wallet or key management error."""

    pass


class CredentialCorruptionError(WalletError):
    """A stored wallet record exists but cannot be decrypted or imported."""

    pass


class StoreUnavailableError(BasebotError):
    """Credential store failed even after a retry."""

    pass


class ValidationError(BasebotError):
    """User input rejected. The conversation resets to idle."""

    pass


class ProviderError(BasebotError):
    """Trading provider call failed."""

    pass
