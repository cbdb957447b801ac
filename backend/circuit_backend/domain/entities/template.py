"""Domain entity for built-in circuit templates."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CircuitTemplate:
    """A ready-made circuit diagram a user can start from."""

    id: str
    name: str
    description: str
    category: str
    payload: dict[str, Any] = field(default_factory=dict)
