"""DTOs for action execution."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionOutcome:
    """Successful provider call result (failures are raised, not returned)."""

    provider: str
    task: str
    response: dict[str, Any] = field(default_factory=dict)
