"""
deeplock Errors

Explicit error types raised by the resolver, the lock primitive and the
locked objects themselves.

This module contains NO execution logic.
"""

from dataclasses import dataclass
from typing import Any, Optional

from deeplock.lock_types import Permission


@dataclass(frozen=True)
class DeepLockError(Exception):
    """Base error for all deeplock failures."""
    message: str

    def __str__(self) -> str:
        return f"[DEEPLOCK ERROR] {self.message}"


@dataclass(frozen=True)
class InvalidActionError(DeepLockError, ValueError):
    """
    Raised when the requested lock action is not recognized.

    Raised before the traversal starts, so no node has been locked.
    """
    action: Any = None

    def __str__(self) -> str:
        return f"[INVALID ACTION] Options action can't be {self.action!r}: {self.message}"


@dataclass(frozen=True)
class UnlockableObjectError(DeepLockError, TypeError):
    """
    Raised when the lock primitive cannot lock a node in place.

    Nodes visited before the failure stay locked.
    """
    type_name: str = ""

    def __str__(self) -> str:
        return f"[UNLOCKABLE OBJECT] {self.type_name}: {self.message}"


@dataclass(frozen=True)
class LockViolationError(DeepLockError, TypeError):
    """
    Raised when a locked object or a read-only view refuses a write.
    """
    permission: Optional[Permission] = None
    type_name: str = ""
    key: Any = None

    def __str__(self) -> str:
        operation = self.permission.name if self.permission is not None else "WRITE"
        return f"[LOCK VIOLATION] {operation} {self.key!r} on {self.type_name}: {self.message}"
