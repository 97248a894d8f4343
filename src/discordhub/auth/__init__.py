"""Authentication layer: interfaces and credential storage."""

from discordhub.auth.interfaces import AuthCredentials, AuthProvider

__all__ = ["AuthCredentials", "AuthProvider"]
