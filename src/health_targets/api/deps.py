"""Request dependencies: container lookup and bearer authentication."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import Header, HTTPException, Request, status
from jose import JWTError, jwt

if TYPE_CHECKING:
    from health_targets.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def parse_bearer_token(authorization: str | None) -> str:
    """Return the token of a `Bearer <token>` header."""
    if not authorization:
        raise _unauthorized("Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":  # noqa: PLR2004
        raise _unauthorized("Invalid Authorization scheme")
    return parts[1]


def decode_user_id(token: str, secret: str, algorithm: str) -> UUID:
    """Verify the token signature and return the user id from `sub`."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        raise _unauthorized("Invalid token") from exc
    subject = payload.get("sub")
    if subject is None:
        raise _unauthorized("Invalid token payload")
    try:
        return UUID(str(subject))
    except ValueError as exc:
        raise _unauthorized("Invalid token subject") from exc


async def get_current_user_id(
    request: Request, authorization: str | None = Header(default=None)
) -> UUID:
    """Authenticate the request and return the caller's user id."""
    container = get_container(request)
    token = parse_bearer_token(authorization)
    return decode_user_id(
        token, container.settings.jwt_secret, container.settings.jwt_algorithm
    )
