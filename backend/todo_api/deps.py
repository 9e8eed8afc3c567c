from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from fastapi import Depends, Header, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .auth import InvalidTokenError, decode_token
from .config import Settings
from .errors import INVALID_BODY, BadRequest, Forbidden, ServiceUnavailable, Unauthorized
from .schemas import CredentialsIn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session(request: Request) -> Iterator[Session]:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise ServiceUnavailable()
    with Session(engine) as s:
        yield s


FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_credentials(request: Request) -> CredentialsIn:
    """Credentials from a JSON body or an HTML form post."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        data = {k: form.get(k) for k in ("email", "password") if k in form}
    else:
        raw = await request.body()
        if not raw.strip():
            return CredentialsIn()
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise BadRequest(INVALID_BODY) from exc

    if data is None:
        return CredentialsIn()
    if not isinstance(data, dict):
        raise BadRequest(INVALID_BODY)
    try:
        return CredentialsIn.model_validate(data)
    except ValidationError as exc:
        raise BadRequest(INVALID_BODY) from exc


def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Bearer-token gate for protected routes.

    No header at all is a 401. A header that does not carry a verifiable
    ``Bearer <token>`` is a 403. Either way the exception stops the request
    before the route body runs.
    """
    if not authorization:
        raise Unauthorized()

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Forbidden()

    try:
        claims = decode_token(token.strip(), settings.jwt_secret, settings.jwt_alg)
        user = CurrentUser(id=int(claims.user_id), email=claims.email)
    except (InvalidTokenError, ValueError) as exc:
        logger.info("Rejected bearer token on %s: %s", request.url.path, exc)
        raise Forbidden() from exc

    request.state.user = user
    return user
