"""Exceptions raised by the cart, order and store layers."""
from typing import Any, List, Optional


class StoreError(Exception):
    """Base exception for all storefront errors."""

    pass


class ValidationError(StoreError):
    """Raised when input is malformed. Nothing has been mutated."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ConflictError(StoreError):
    """Raised when a record with the same key already exists."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} already exists: {key}")


class NotFoundError(StoreError):
    """Raised when a product, cart entry or order does not exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")
