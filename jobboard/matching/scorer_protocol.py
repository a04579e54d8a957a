"""Scorer protocol for pluggable scoring engines.

Defines the interface the application service expects. FitScorer is the
only implementation; tests substitute fakes through the same protocol.
"""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Scorer(Protocol):
    """Protocol for candidate fit scoring engines."""

    def score(self, job: Any, applicant: Any) -> int:
        """Score one applicant against one job (0-100)."""
        ...
