# src/taskboard/core/errors.py

from __future__ import annotations


class StoreError(RuntimeError):
    """A document store read or write was rejected or failed."""


class PermissionDenied(PermissionError):
    """The requester is not allowed to mutate the target document."""
