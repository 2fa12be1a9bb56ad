"""Domain layer: entities, value objects, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from autoflow.domain.entities import (
    ActionResult,
    ActionSpec,
    ExecutionEntity,
    TriggerEvent,
    TriggerSpec,
    WorkflowEntity,
)
from autoflow.domain.exceptions import (
    ActionExecutionException,
    AuthenticationException,
    AutoflowException,
    CredentialNotConnectedException,
    DuplicateEventException,
    InvalidEventException,
    ResourceNotFoundException,
    StoreUnavailableException,
    ValidationException,
    WorkflowHasNoActionsException,
)

__all__ = [
    # Entities
    "ActionResult",
    "ActionSpec",
    "ExecutionEntity",
    "TriggerEvent",
    "TriggerSpec",
    "WorkflowEntity",
    # Exceptions
    "ActionExecutionException",
    "AuthenticationException",
    "AutoflowException",
    "CredentialNotConnectedException",
    "DuplicateEventException",
    "InvalidEventException",
    "ResourceNotFoundException",
    "StoreUnavailableException",
    "ValidationException",
    "WorkflowHasNoActionsException",
]
