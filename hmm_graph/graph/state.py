"""
State roles and read-only state snapshots.

States live inside a ``StateGraph`` arena and are referred to by integer
handles; ``StateView`` is a detached, immutable picture of one of them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Mapping


class StateType(Enum):
    """Role of a state in the model."""

    START = "START"
    HIDDEN = "HIDDEN"
    END = "END"

    def __str__(self) -> str:
        return self.value[0]


@dataclass(frozen=True)
class StateView:
    """Immutable snapshot of a single state."""

    handle: int
    state_id: int
    state_type: StateType
    transitions: Mapping[int, float]
    emissions: Mapping[str, float]
    incoming: FrozenSet[int]

    @property
    def is_hidden(self) -> bool:
        return self.state_type is StateType.HIDDEN

    def __str__(self) -> str:
        return f"[HMM state, ID = {self.state_id}, type = {self.state_type.name}]"
