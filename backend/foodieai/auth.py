# foodieai/auth.py
# ---------------------------------------------------------
# Auth context: inbound headers -> internal user id.
#
# 1) "Authorization: Bearer <jwt>"  -> "sub" claim
#    - verified (HS256 + audience) when OAUTH_TOKEN_SECRET is set
#    - read without verification otherwise (dev / upstream proxy)
# 2) no header + DEV_AUTH_BYPASS_SUB -> that subject
# 3) anything else                  -> AuthError
#
# The subject is the user's external id; a User row is created
# the first time a subject is seen.
# ---------------------------------------------------------

from typing import Any, Mapping, Optional

from fastapi import Depends, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from foodieai.config import config
from foodieai.db import get_db
from foodieai.errors import AuthError
from foodieai.logger import get_logger
from foodieai.users import get_or_create_by_external_id

logger = get_logger(__name__)

JWT_ALGORITHMS = ["HS256"]


def get_authorization_header(headers: Mapping[str, Any]) -> Optional[str]:
    for name, value in headers.items():
        if name.lower() == "authorization":
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            return value or None
    return None


def has_authorization_header(headers: Mapping[str, Any]) -> bool:
    return get_authorization_header(headers) is not None


def extract_bearer_token(headers: Mapping[str, Any]) -> Optional[str]:
    """Bearer token, or None when no Authorization header was sent."""
    value = get_authorization_header(headers)
    if value is None:
        return None
    if not value.startswith("Bearer "):
        raise AuthError("Missing Bearer token")
    token = value[len("Bearer "):].strip()
    if not token:
        raise AuthError("Missing Bearer token")
    return token


def subject_from_token(token: str) -> str:
    try:
        if config.OAUTH_TOKEN_SECRET:
            claims = jwt.decode(
                token,
                config.OAUTH_TOKEN_SECRET,
                algorithms=JWT_ALGORITHMS,
                audience=config.OAUTH_AUDIENCE,
            )
        else:
            claims = jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise AuthError("Invalid access token") from exc

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise AuthError("Invalid access token")
    return subject


def resolve_subject(headers: Mapping[str, Any]) -> str:
    token = extract_bearer_token(headers)
    if token is None:
        if config.DEV_AUTH_BYPASS_SUB:
            return config.DEV_AUTH_BYPASS_SUB
        raise AuthError("Missing Bearer token")
    return subject_from_token(token)


def resolve_user_id(db: Session, headers: Mapping[str, Any]) -> str:
    logger.debug(f"Auth header present: {has_authorization_header(headers)}")
    subject = resolve_subject(headers)
    user = get_or_create_by_external_id(db, subject)
    return user.id


# ---------------------------------------------------------
# FastAPI dependency for REST routes
# ---------------------------------------------------------

def current_user_id(request: Request, db: Session = Depends(get_db)) -> str:
    return resolve_user_id(db, request.headers)


def optional_user_id(request: Request, db: Session = Depends(get_db)) -> Optional[str]:
    """Caller's id when a token is sent, None for anonymous calls."""
    if not has_authorization_header(request.headers):
        return None
    return resolve_user_id(db, request.headers)
