"""Application ports (Protocols) implemented by infrastructure."""

from autoflow.application.interfaces.repositories import (
    IExecutionStore,
    IWorkflowRepository,
)
from autoflow.application.interfaces.services import (
    IActionExecutor,
    IActionExecutorRegistry,
    ICredentialStore,
    IEventDeduplicator,
    IPayloadNormalizer,
)

__all__ = [
    "IActionExecutor",
    "IActionExecutorRegistry",
    "ICredentialStore",
    "IEventDeduplicator",
    "IExecutionStore",
    "IPayloadNormalizer",
    "IWorkflowRepository",
]
