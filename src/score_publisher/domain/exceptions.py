from __future__ import annotations


class DomainError(Exception):
    """Base class for domain rule violations."""


class InvalidTransitionError(DomainError):
    pass
