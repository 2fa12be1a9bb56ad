"""Typed trigger and action configuration.

Known (app, task) and (app, event) pairs get a pydantic model so config is
validated when a workflow is saved. Unknown pairs fall back to an opaque
key-value bag; only the Action Executor for that app interprets it.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)

from autoflow.domain.exceptions import ValidationException


class _Config(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class SlackSendMessageConfig(_Config):
    """slack/send_message: post text to a channel (text may be a template)."""

    channel: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class GmailSendEmailConfig(_Config):
    """gmail/send_email: send a plain-text email (subject/body may be templates)."""

    to: list[EmailStr] = Field(..., min_length=1)
    subject: str = ""
    body: str = ""

    @field_validator("to", mode="before")
    @classmethod
    def split_recipients(cls, v: Any) -> Any:
        """Accept "a@x.com, b@y.com" (e.g. a rendered template) as well as a list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class CalendarCreateEventConfig(_Config):
    """calendar/create_event: insert an event (fields may be templates)."""

    summary: str = Field(..., min_length=1)
    start: str = Field(..., min_length=1)
    end: str = Field(..., min_length=1)
    calendar_id: str = "primary"


class GmailNewEmailTrigger(_Config):
    """gmail/new_email: optionally restricted to a label."""

    label: str | None = None


class SlackNewMessageTrigger(_Config):
    """slack/new_message: optionally restricted to a channel."""

    channel: str | None = None


ACTION_CONFIGS: dict[tuple[str, str], type[BaseModel]] = {
    ("slack", "send_message"): SlackSendMessageConfig,
    ("gmail", "send_email"): GmailSendEmailConfig,
    ("calendar", "create_event"): CalendarCreateEventConfig,
}

TRIGGER_CONFIGS: dict[tuple[str, str], type[BaseModel]] = {
    ("gmail", "new_email"): GmailNewEmailTrigger,
    ("slack", "new_message"): SlackNewMessageTrigger,
}


def _parse(
    registry: dict[tuple[str, str], type[BaseModel]],
    app: str,
    name: str,
    config: dict[str, Any] | None,
    field: str,
) -> BaseModel | dict[str, Any]:
    model = registry.get((app, name))
    if model is None:
        return dict(config or {})
    try:
        return model.model_validate(config or {})
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationException(
            f"Invalid config for {app}/{name}: {first.get('msg', 'invalid value')}",
            field=f"{field}.{loc}" if loc else field,
        ) from e


def parse_action_config(
    app: str, task: str, config: dict[str, Any] | None, *, field: str = "config"
) -> BaseModel | dict[str, Any]:
    """Return the typed config for (app, task), or a plain dict for unknown pairs.

    Raises:
        ValidationException: When a known pair's config is invalid.
    """
    return _parse(ACTION_CONFIGS, app, task, config, field)


def parse_trigger_config(
    app: str, event: str, config: dict[str, Any] | None, *, field: str = "trigger.config"
) -> BaseModel | dict[str, Any]:
    """Return the typed config for (app, event), or a plain dict for unknown pairs."""
    return _parse(TRIGGER_CONFIGS, app, event, config, field)


def contains_template(value: Any) -> bool:
    """Return whether any string inside value holds Jinja markup."""
    if isinstance(value, str):
        return "{{" in value or "{%" in value
    if isinstance(value, dict):
        return any(contains_template(v) for v in value.values())
    if isinstance(value, list):
        return any(contains_template(v) for v in value)
    return False


def validate_action_config(
    app: str, task: str, config: dict[str, Any] | None, *, field: str = "config"
) -> None:
    """Validate an action config when a workflow is saved.

    Literal configs get full typed validation. Configs with templates are
    checked for required and unknown keys only; their values are validated
    after rendering, when the action runs.

    Raises:
        ValidationException: When the config cannot be valid for (app, task).
    """
    config = config or {}
    model = ACTION_CONFIGS.get((app, task))
    if model is None:
        return
    if not contains_template(config):
        parse_action_config(app, task, config, field=field)
        return
    fields = model.model_fields
    unknown = sorted(k for k in config if k not in fields)
    if unknown:
        raise ValidationException(
            f"Unknown config field {unknown[0]!r} for {app}/{task}",
            field=f"{field}.{unknown[0]}",
        )
    missing = [n for n, f in fields.items() if f.is_required() and n not in config]
    if missing:
        raise ValidationException(
            f"Missing config field {missing[0]!r} for {app}/{task}",
            field=f"{field}.{missing[0]}",
        )
