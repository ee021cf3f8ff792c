"""
deeplock Constants

Package-wide constants for the graph locker and its collaborators.

This module contains NO execution logic.
All constants are UPPERCASE and immutable.
"""

from typing import Final, Dict

# =============================================================================
# PACKAGE IDENTITY CONSTANTS
# =============================================================================

PACKAGE_NAME: Final[str] = "deeplock"
"""Distribution and import name."""

PACKAGE_VERSION: Final[str] = "1.0.0"
"""Package version identifier."""

# =============================================================================
# ACTION CONSTANTS
# =============================================================================

DEFAULT_ACTION_NAME: Final[str] = "freeze"
"""Action applied when the caller does not request one. Strongest lock."""

ACTION_OPTION_KEY: Final[str] = "action"
"""The only recognized key of a mapping passed as options."""

# =============================================================================
# LOCKED CLASS CONSTANTS
# =============================================================================

LOCKED_CLASS_PREFIXES: Final[Dict[str, str]] = {
    "preventExtensions": "NonExtensible",
    "seal": "Sealed",
    "freeze": "Frozen",
}
"""Name prefix of the generated locked subclass, keyed by action name."""

LOCK_ACTION_ATTRIBUTE: Final[str] = "__lock_action__"
"""Class attribute holding the LockAction of a generated locked class."""

LOCK_BASE_ATTRIBUTE: Final[str] = "__lock_base__"
"""Class attribute holding the original class of a generated locked class."""

# =============================================================================
# LOGGING CONSTANTS
# =============================================================================

LOGGER_NAMESPACE: Final[str] = "deeplock"
"""Parent logger name. Module loggers are children of it."""
