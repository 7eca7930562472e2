"""FastAPI auth dependencies.

These are used as Depends() in route handlers to extract and verify
the principal from the Bearer token on the request. Token verification
is pure computation with no database round trip, so a token for a user
deleted after issue stays usable until it expires.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from taskhub.auth.jwt import TokenCodec, get_token_codec
from taskhub.errors import raise_for_failure
from taskhub.outcome import Failure, FailureKind


@dataclass(frozen=True)
class Principal:
    """The authenticated user making the request."""

    user_id: uuid.UUID


async def get_current_principal(
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
) -> Principal:
    """Resolve the Bearer token to a Principal (401 if missing or bad)."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise_for_failure(
            Failure(FailureKind.TOKEN_INVALID, "Authentication required")
        )

    result = codec.verify(token.strip())
    if isinstance(result, Failure):
        raise_for_failure(result)
    return Principal(user_id=result.value)
