"""Credential store implementations."""

from socialnet.stores.base import CredentialStore
from socialnet.stores.memory import MemoryCredentialStore
from socialnet.stores.postgres import PostgresCredentialStore


def build_credential_store(kind: str) -> CredentialStore:
    """Create the store selected by the ``credential_store`` setting."""
    if kind == "memory":
        return MemoryCredentialStore()
    if kind == "postgres":
        return PostgresCredentialStore()
    raise ValueError(f"Unknown credential store: {kind!r}")


__all__ = [
    "CredentialStore",
    "MemoryCredentialStore",
    "PostgresCredentialStore",
    "build_credential_store",
]
