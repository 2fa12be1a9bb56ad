"""Action config templating: render string fields against the trigger payload (Jinja)."""

from __future__ import annotations

from typing import Any

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from autoflow.domain.exceptions import ActionExecutionException


class ActionTemplateRenderer:
    """Renders every string in an action config with context {payload}.

    Sandboxed: templates come from user-authored workflow definitions.
    Missing payload keys render as an error, not as an empty string.
    """

    def __init__(self) -> None:
        self._env = SandboxedEnvironment(autoescape=False, undefined=StrictUndefined)

    def render_config(
        self, app: str, config: dict[str, Any], payload: dict[str, Any]
    ) -> dict[str, Any]:
        """Return a copy of config with templated strings rendered.

        Raises:
            ActionExecutionException: If a template is invalid or references a missing key.
        """
        ctx = {"payload": payload}
        try:
            return {k: self._render(v, ctx) for k, v in config.items()}
        except TemplateError as e:
            raise ActionExecutionException(app, f"template_error: {e}") from e

    def _render(self, value: Any, ctx: dict[str, Any]) -> Any:
        if isinstance(value, str):
            if "{{" not in value and "{%" not in value:
                return value
            return self._env.from_string(value).render(**ctx)
        if isinstance(value, dict):
            return {k: self._render(v, ctx) for k, v in value.items()}
        if isinstance(value, list):
            return [self._render(v, ctx) for v in value]
        return value
