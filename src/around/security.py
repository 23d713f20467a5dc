from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .settings import get_settings

JWT_ALGORITHM = "HS256"
USERNAME_CLAIM = "username"

bearer_scheme = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    """The authenticated caller, as extracted from a validated token."""

    model_config = {"frozen": True}

    username: str


def get_signing_key() -> str | None:
    return get_settings().jwt_signing_key


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_token(
    creds: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Principal:
    signing_key = get_signing_key()
    if not signing_key or creds is None:
        raise _unauthorized("Invalid or missing token")

    try:
        claims = jwt.decode(creds.credentials, signing_key, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or missing token")

    username = claims.get(USERNAME_CLAIM)
    if not isinstance(username, str) or not username:
        raise _unauthorized("Token has no username claim")
    return Principal(username=username)


RequirePrincipal = Annotated[Principal, Depends(verify_token)]
