"""
BASEBOT Data - Encrypted wallet records and the credential store.
"""

from .credentials import CredentialStore
from .database import CredentialDatabase, CredentialRecord, Failed, Found, NotFound

__all__ = [
    "CredentialStore",
    "CredentialDatabase",
    "CredentialRecord",
    "Found",
    "NotFound",
    "Failed",
]
