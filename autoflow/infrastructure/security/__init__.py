"""Security helpers: credential token encryption and JWT verification."""

from autoflow.infrastructure.security.encryption import TokenEncryptor
from autoflow.infrastructure.security.jwt import create_access_token, verify_token

__all__ = ["TokenEncryptor", "create_access_token", "verify_token"]
