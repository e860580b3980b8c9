# core/lifecycle.py

"""
DOCUMENT LIFECYCLE RULES

A Lifecycle is a closed transition table for one document type.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth per document type

Services ask a Lifecycle whether a move is legal (validate), and only
then apply their side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.errors import InvalidStateError


@dataclass(frozen=True)
class Lifecycle:
    name: str
    transitions: dict[str, frozenset[str]]
    terminal: frozenset[str] = field(default_factory=frozenset)

    def can_transition(self, *, from_status: str, to_status: str) -> bool:
        if from_status in self.terminal:
            return False
        return to_status in self.transitions.get(from_status, frozenset())

    def validate(self, document, target_status: str) -> None:
        current = document.status
        if not self.can_transition(from_status=current, to_status=target_status):
            label = getattr(document, "number", None) or getattr(document, "pk", "")
            raise InvalidStateError(
                f"{self.name} {label} cannot transition from "
                f"'{current}' to '{target_status}'",
                current=current,
                target=target_status,
            )

    def require(self, document, *allowed: str, action: str) -> None:
        """Precondition check for actions that are not plain status moves."""
        if document.status not in allowed:
            label = getattr(document, "number", None) or getattr(document, "pk", "")
            raise InvalidStateError(
                f"Cannot {action}: {self.name} {label} is '{document.status}' "
                f"(expected {', '.join(allowed)})",
                current=document.status,
            )


def build_lifecycle(name: str, table: dict[str, set[str]], terminal: set[str]) -> Lifecycle:
    return Lifecycle(
        name=name,
        transitions={k: frozenset(v) for k, v in table.items()},
        terminal=frozenset(terminal),
    )
