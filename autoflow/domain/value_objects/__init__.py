"""Domain value objects (typed trigger/action configuration)."""

from autoflow.domain.value_objects.configs import (
    ACTION_CONFIGS,
    TRIGGER_CONFIGS,
    CalendarCreateEventConfig,
    GmailNewEmailTrigger,
    GmailSendEmailConfig,
    SlackNewMessageTrigger,
    SlackSendMessageConfig,
    contains_template,
    parse_action_config,
    parse_trigger_config,
    validate_action_config,
)

__all__ = [
    "ACTION_CONFIGS",
    "TRIGGER_CONFIGS",
    "CalendarCreateEventConfig",
    "GmailNewEmailTrigger",
    "GmailSendEmailConfig",
    "SlackNewMessageTrigger",
    "SlackSendMessageConfig",
    "contains_template",
    "parse_action_config",
    "parse_trigger_config",
    "validate_action_config",
]
