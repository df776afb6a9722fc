# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Exceptions, messages, constrained types
- auth/: Credentials and token grants
- catalog/: Search results, scoring, and movement grouping
- playback/: Per-user session state machine
"""

from music_conductor.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
