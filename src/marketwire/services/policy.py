"""Error-handling policy — one table decides how every operation fails.

Learn: The real-time layer mixes three failure contracts:

- PROPAGATE: write paths where losing the write loses user-visible state
  (sending a message, sending a notification). The caller gets the
  MessagingStoreError.
- DEGRADE: advisory reads (presence, view counts, inbox, popular
  searches). Availability beats correctness, so the caller gets a safe
  default: offline, zero, empty.
- BEST_EFFORT: fire-and-forget side effects (view counting, search
  telemetry, mark-as-read). The caller gets a BestEffort value it is free
  to ignore.

Keeping the mapping in OPERATION_POLICIES instead of scattering
try/except blocks makes the contract auditable in one place. Decorating
an operation that is missing from the table fails at import time.
"""

import enum
import functools
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError

from marketwire.realtime.pubsub import MessagingStoreError

logger = structlog.get_logger()


class ErrorPolicy(str, enum.Enum):
    PROPAGATE = "propagate"
    DEGRADE = "degrade"
    BEST_EFFORT = "best_effort"


OPERATION_POLICIES: dict[str, ErrorPolicy] = {
    # Message log
    "send_message": ErrorPolicy.PROPAGATE,
    "get_messages": ErrorPolicy.PROPAGATE,
    "get_conversation_meta": ErrorPolicy.PROPAGATE,
    # Presence
    "set_presence": ErrorPolicy.PROPAGATE,
    "get_presence": ErrorPolicy.DEGRADE,
    # Notifications
    "send_notification": ErrorPolicy.PROPAGATE,
    "get_user_notifications": ErrorPolicy.DEGRADE,
    "unread_count": ErrorPolicy.DEGRADE,
    "mark_notification_as_read": ErrorPolicy.BEST_EFFORT,
    # Listing activity
    "increment_views": ErrorPolicy.BEST_EFFORT,
    "get_views": ErrorPolicy.DEGRADE,
    # Search telemetry
    "track_search": ErrorPolicy.BEST_EFFORT,
    # Typing indicators
    "set_typing": ErrorPolicy.BEST_EFFORT,
    "get_popular_searches": ErrorPolicy.DEGRADE,
    "get_search_suggestions": ErrorPolicy.DEGRADE,
    "recent_searches": ErrorPolicy.DEGRADE,
    # Subscriptions
    "subscribe": ErrorPolicy.PROPAGATE,
    "unsubscribe": ErrorPolicy.PROPAGATE,
}


@dataclass(frozen=True)
class BestEffort:
    """Outcome of a fire-and-forget operation. Safe to discard."""

    ok: bool
    error: Optional[str] = None

    @classmethod
    def done(cls) -> "BestEffort":
        return cls(ok=True)

    @classmethod
    def failed(cls, error: str) -> "BestEffort":
        return cls(ok=False, error=error)


def governed(operation: str, default: Optional[Callable[[], Any]] = None):
    """Apply the table's policy for `operation` to an async method.

    DEGRADE operations must pass `default`, a factory for the fallback
    value (a factory, so callers never share a mutable default).
    """
    policy = OPERATION_POLICIES[operation]
    if policy is ErrorPolicy.DEGRADE and default is None:
        raise ValueError(f"Degrading operation {operation!r} needs a default")

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                result = await fn(*args, **kwargs)
            except (MessagingStoreError, ValidationError) as e:
                if policy is ErrorPolicy.PROPAGATE:
                    logger.error(f"{operation}.failed", error=str(e))
                    if isinstance(e, ValidationError):
                        # Malformed stored documents count as store failures
                        raise MessagingStoreError(f"{operation} failed: {e}") from e
                    raise
                logger.warning(f"{operation}.failed", error=str(e), policy=policy.value)
                if policy is ErrorPolicy.DEGRADE:
                    return default()
                return BestEffort.failed(str(e))

            if policy is ErrorPolicy.BEST_EFFORT:
                return BestEffort.done()
            return result

        wrapper.error_policy = policy
        return wrapper

    return decorator
