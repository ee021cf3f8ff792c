"""
deeplock Options.

This module provides the Action Resolver: it validates the caller's lock
options and settles on one LockAction before any node is touched.

All functions are pure (no side effects).
LockOptions is frozen=True for immutability.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .constants import ACTION_OPTION_KEY, DEFAULT_ACTION_NAME, LOGGER_NAMESPACE
from .errors import InvalidActionError
from .lock_types import LockAction

logger = logging.getLogger(f"{LOGGER_NAMESPACE}.options")

DEFAULT_ACTION: LockAction = LockAction(DEFAULT_ACTION_NAME)


def coerce_action(action: Any) -> LockAction:
    """Turn a LockAction or action name into a LockAction.

    Falsy values (None, "") select DEFAULT_ACTION.

    Args:
        action: LockAction, action name or None

    Returns:
        LockAction

    Raises:
        InvalidActionError: If ``action`` is not one of the recognized names
    """
    if isinstance(action, LockAction):
        return action
    if not action:
        return DEFAULT_ACTION
    if isinstance(action, str):
        try:
            return LockAction(action)
        except ValueError:
            pass
    raise InvalidActionError(
        message=f"expected one of {', '.join(repr(a.value) for a in LockAction)}",
        action=action,
    )


@dataclass(frozen=True)
class LockOptions:
    """Immutable options for deep_lock.

    Attributes:
        action: LockAction to apply, FREEZE unless given
    """
    action: LockAction = field(default=DEFAULT_ACTION)

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", coerce_action(self.action))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "LockOptions":
        """Build LockOptions from plain configuration. Unknown keys are ignored."""
        return cls(action=options.get(ACTION_OPTION_KEY))


LockOptionsLike = Union[None, LockOptions, Mapping[str, Any], LockAction, str]


def resolve_action(options: LockOptionsLike = None) -> LockAction:
    """Resolve the LockAction requested by ``options``.

    Decision table:
    | options | → LockAction |
    |---------|--------------|
    | None | FREEZE |
    | LockOptions | options.action |
    | Mapping without "action" or with a falsy one | FREEZE |
    | Mapping with a recognized "action" | that action |
    | LockAction | itself |
    | recognized action name | that action |
    | anything else | InvalidActionError |

    Args:
        options: Caller's options

    Returns:
        LockAction

    Raises:
        InvalidActionError: If the requested action is not recognized
    """
    if options is None:
        action = DEFAULT_ACTION
    elif isinstance(options, LockOptions):
        action = options.action
    elif isinstance(options, Mapping):
        action = LockOptions.from_mapping(options).action
    else:
        action = coerce_action(options)

    logger.debug("resolved lock action %s", action.value)
    return action

