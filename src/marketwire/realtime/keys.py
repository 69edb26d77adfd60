"""Redis key and channel names.

Learn: Keys hold state (lists, hashes, counters); channels carry pub/sub
events. Redis keeps the two namespaces apart, so the notification log and
the notification channel can share the name notifications:{user_id}.

Logical keys address subscriptions in the SubscriptionRegistry and are
independent of the channel a subscription listens on.
"""

PRESENCE_CHANNEL = "presence:updates"
SEARCH_LOG_KEY = "search:analytics"
SUGGESTIONS_KEY = "search:suggestions"


# ─── Chat ────────────────────────────────────────────────


def chat_messages_key(chat_id: str) -> str:
    return f"chat:{chat_id}:messages"


def chat_meta_key(chat_id: str) -> str:
    return f"chat:{chat_id}:meta"


def chat_channel(chat_id: str) -> str:
    return f"chat:{chat_id}"


# ─── Presence ────────────────────────────────────────────


def presence_key(user_id: str) -> str:
    return f"presence:{user_id}"


# ─── Notifications ───────────────────────────────────────


def notifications_key(user_id: str) -> str:
    return f"notifications:{user_id}"


def notifications_channel(user_id: str) -> str:
    return f"notifications:{user_id}"


# ─── Listings ────────────────────────────────────────────


def listing_views_key(listing_id: str) -> str:
    return f"listing:{listing_id}:views"


def listing_channel(listing_id: str) -> str:
    return f"listing:{listing_id}"


# ─── Rate limiting ───────────────────────────────────────


def rate_limit_key(identifier: str, window: int) -> str:
    return f"rate_limit:{identifier}:{window}"


# ─── Logical subscription keys ───────────────────────────


def user_logical_key(user_id: str) -> str:
    return f"user:{user_id}"


def chat_logical_key(chat_id: str) -> str:
    return f"chat:{chat_id}"


def listing_logical_key(listing_id: str) -> str:
    return f"listing:{listing_id}"
