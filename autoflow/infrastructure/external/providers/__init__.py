"""Provider plugins: action executors, templating, webhook normalizers."""

from autoflow.infrastructure.external.providers.calendar import CalendarActionExecutor
from autoflow.infrastructure.external.providers.gmail import GmailActionExecutor
from autoflow.infrastructure.external.providers.normalizers import (
    GenericEventNormalizer,
    PayloadNormalizerRegistry,
    SlackEventNormalizer,
    build_default_normalizers,
)
from autoflow.infrastructure.external.providers.registry import (
    ActionExecutorRegistry,
    build_default_registry,
)
from autoflow.infrastructure.external.providers.slack import SlackActionExecutor
from autoflow.infrastructure.external.providers.templating import (
    ActionTemplateRenderer,
)

__all__ = [
    "ActionExecutorRegistry",
    "ActionTemplateRenderer",
    "CalendarActionExecutor",
    "GenericEventNormalizer",
    "GmailActionExecutor",
    "PayloadNormalizerRegistry",
    "SlackActionExecutor",
    "SlackEventNormalizer",
    "build_default_normalizers",
    "build_default_registry",
]
