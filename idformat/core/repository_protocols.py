"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - The identifier registry is read-only from this service's point of view

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: implementations do IO
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from idformat.core.domain_types import FormatRule, IdentifierClassification


class IdentifierRegistry(Protocol):
    """Contract for reading identifier classification - implemented by shell."""
    async def get_classification(
        self, identifier: str,
    ) -> IdentifierClassification | None: ...


RuleLoader = Callable[[], Awaitable[list[FormatRule]]]
