"""Event type constants.

Learn: Centralizing event types as constants prevents typos and
makes it easy to discover every payload a client can receive.
Each payload published on a channel is {"type": <one of these>, ...}.
"""

# ─── Chat ────────────────────────────────────────────────

NEW_MESSAGE = "new_message"

# ─── Presence ────────────────────────────────────────────

USER_PRESENCE = "user_presence"

# ─── Notifications ───────────────────────────────────────

NEW_NOTIFICATION = "new_notification"

# ─── Listing activity ────────────────────────────────────

VIEW_UPDATE = "view_update"

# ─── Typing indicators ───────────────────────────────────

USER_TYPING = "user_typing"
