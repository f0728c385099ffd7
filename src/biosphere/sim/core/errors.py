from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Raised when a caller passes an argument outside its documented domain."""
