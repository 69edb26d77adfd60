"""FastAPI identity dependencies.

Learn: These are used as Depends() in route handlers to extract the
current user from the gateway-supplied X-User-ID header.

Two flavours, as with any auth dependency:
1. get_current_user_optional → None when the header is missing
   (search tracking works for anonymous visitors)
2. get_current_user → 401 when the header is missing
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException


class CurrentIdentity:
    """The user a request acts on behalf of."""

    def __init__(self, user_id: str):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r})"


async def get_current_user_optional(
    x_user_id: Optional[str] = Header(None),
) -> Optional[CurrentIdentity]:
    """Identity if the gateway forwarded one, else None."""
    if x_user_id and x_user_id.strip():
        return CurrentIdentity(user_id=x_user_id.strip())
    return None


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Identity, required: 401 if the header is missing."""
    if not identity:
        raise HTTPException(status_code=401, detail="Authentication required")
    return identity
