"""Service interfaces (ports) for the application layer.

Credential Store and Action Executors are external collaborators of the
engine; these Protocols are the whole contract the engine relies on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from autoflow.application.dtos.action import ActionOutcome
    from autoflow.application.dtos.connection import Token
    from autoflow.application.dtos.event import RawEvent
    from autoflow.domain.entities.workflow import ActionSpec


# Credential store interface
class ICredentialStore(Protocol):
    """Resolves a user's decrypted access token for a provider app."""

    async def get_token(self, user_id: str, app: str) -> Token:
        """Return the token or raise CredentialNotConnectedException."""

    async def is_connected(self, user_id: str, app: str) -> bool:
        """Return whether the user has a connected credential for app."""

    async def resolve_user(self, app: str, external_account_id: str) -> str | None:
        """Map a provider identity (e.g. Slack team id) to the owning user id."""


# Action executor interface
class IActionExecutor(Protocol):
    """Performs one action against a provider API."""

    async def execute(
        self, action: ActionSpec, token: Token, payload: dict[str, Any]
    ) -> ActionOutcome:
        """Run the action. Raise ActionExecutionException on provider failure."""


# Action executor lookup (plugin registry)
class IActionExecutorRegistry(Protocol):
    """Resolves the executor for a provider app id."""

    def get(self, app: str) -> IActionExecutor:
        """Return the executor or raise ActionExecutionException('unsupported_app')."""


# Event deduplicator interface
class IEventDeduplicator(Protocol):
    """Bounded recent-window memory of provider event ids."""

    async def seen_or_remember(self, key: str, ttl_seconds: int) -> bool:
        """Return True if key was seen inside the window; otherwise remember it and return False."""

    async def forget(self, key: str) -> None:
        """Drop key so a resubmitted event is processed again."""


# Payload normalizer interface
class IPayloadNormalizer(Protocol):
    """Turns a provider-specific webhook body into a RawEvent."""

    def normalize(self, body: dict[str, Any]) -> RawEvent | None:
        """Return the RawEvent, or None when the delivery should be ignored."""
