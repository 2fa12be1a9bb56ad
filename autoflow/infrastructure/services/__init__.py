"""Infrastructure services: credential store and connection management."""

from autoflow.infrastructure.services.connection_service import ConnectionService
from autoflow.infrastructure.services.credential_store import SqlCredentialStore

__all__ = ["ConnectionService", "SqlCredentialStore"]
