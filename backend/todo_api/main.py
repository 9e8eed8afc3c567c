from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager

import redis
from fastapi import Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import todos as todo_store
from . import users as user_store
from .auth import hash_password, make_token, verify_password
from .config import Settings, load_settings
from .db import get_engine
from .deps import CurrentUser, get_current_user, get_session, get_settings, read_credentials
from .errors import BadRequest, Conflict, InternalError, NotFound, Unauthorized, register_error_handlers
from .models import Base
from .pagination import paginate
from .schemas import (
    CredentialsIn,
    MessageOut,
    PageMeta,
    TodoCreate,
    TodoEnvelope,
    TodoFields,
    TodoListOut,
    TodoOut,
    TodoUpdate,
    TokenOut,
)

logger = logging.getLogger(__name__)

CREDENTIALS_REQUIRED = "Email and password are required."
EMAIL_TAKEN = "Email already exists."
BAD_LOGIN = "Invalid email or password."
TODO_NOT_FOUND = "Todo not found or unauthorized"

MAX_ID = 2**63


def _parse_id(raw: str) -> int | None:
    # ids are opaque to clients; anything that is not one of ours matches nothing
    try:
        value = int(raw)
    except ValueError:
        return None
    if not 0 < value < MAX_ID:
        return None
    return value


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _init_engine(settings: Settings):
    # The database container might not be ready when the API boots.
    # Retry a few times before failing hard.
    engine = get_engine(settings.database_url)
    last_exc: Exception | None = None
    for attempt in range(1, max(settings.db_connect_retries, 1) + 1):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database ready after %d attempt(s)", attempt)
            return engine
        except SQLAlchemyError as exc:
            last_exc = exc
            logger.warning("Database not ready (attempt %d): %s", attempt, exc)
            await asyncio.sleep(1.0)
    engine.dispose()
    raise RuntimeError(f"DB init failed after retries: {last_exc}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.engine = await _init_engine(app.state.settings)
    yield
    if app.state.engine is not None:
        app.state.engine.dispose()
        app.state.engine = None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    _configure_logging(settings.log_level)

    app = FastAPI(title="Todo API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = None
    app.state.redis = redis.Redis.from_url(settings.redis_url, decode_responses=True)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/health")
    def health():
        try:
            app.state.redis.ping()
            redis_ok = True
        except redis.RedisError:
            redis_ok = False
        return {"ok": True, "redis": redis_ok}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    # --- auth -------------------------------------------------------------

    @app.post("/validate-token")
    def validate_token(user: CurrentUser = Depends(get_current_user)):
        return Response(status_code=200)

    @app.post("/register", response_model=MessageOut, status_code=201)
    def register(
        body: CredentialsIn = Depends(read_credentials),
        s: Session = Depends(get_session),
        cfg: Settings = Depends(get_settings),
    ):
        email, password = body.email, body.password
        if not email or not password:
            raise BadRequest(CREDENTIALS_REQUIRED)

        if user_store.find_user_by_email(s, email) is not None:
            raise Conflict(EMAIL_TAKEN)

        try:
            u = user_store.create_user(s, email, hash_password(password, cfg.pbkdf2_iters))
        except IntegrityError as exc:
            # lost a race with a concurrent registration of the same email
            s.rollback()
            raise Conflict(EMAIL_TAKEN) from exc

        logger.info("Registered user %s", u.id)
        return MessageOut(message="User registered successfully!")

    @app.post("/login", response_model=TokenOut)
    def login(
        body: CredentialsIn = Depends(read_credentials),
        s: Session = Depends(get_session),
        cfg: Settings = Depends(get_settings),
    ):
        email, password = body.email, body.password
        if not email or not password:
            raise BadRequest(CREDENTIALS_REQUIRED)

        u = user_store.find_user_by_email(s, email)
        if u is None or not verify_password(password, u.password_hash):
            logger.info("Failed login attempt")
            raise Unauthorized(BAD_LOGIN)

        return TokenOut(token=make_token(u.id, u.email, cfg.jwt_secret, cfg.jwt_alg))

    @app.post("/logout", response_model=MessageOut)
    def logout(user: CurrentUser = Depends(get_current_user)):
        # tokens are not revocable; nothing to tear down
        return MessageOut(message="Logged out successfully!")

    # --- todos ------------------------------------------------------------

    @app.get("/todos", response_model=TodoListOut)
    def list_todos(
        page: str | None = None,
        perpage: str | None = None,
        user: CurrentUser = Depends(get_current_user),
        s: Session = Depends(get_session),
    ):
        total = todo_store.count_todos(s, user.id)
        p = paginate(total, page, perpage)
        rows = todo_store.list_todos_page(s, user.id, p.offset, p.size)
        return TodoListOut(
            todos=[todo_store.to_out(t) for t in rows],
            meta=PageMeta(total=p.total, pages=p.pages, pageSize=p.size, page=p.number),
        )

    @app.post("/todos", response_model=TodoOut)
    def create_todo(
        body: TodoCreate | None = None,
        user: CurrentUser = Depends(get_current_user),
        s: Session = Depends(get_session),
    ):
        body = body or TodoCreate()
        t = todo_store.insert_todo(s, user.id, body.todo or TodoFields())
        return todo_store.to_out(t)

    @app.put("/todos/{todo_id}", response_model=TodoOut)
    def update_todo(
        todo_id: str,
        body: TodoUpdate,
        user: CurrentUser = Depends(get_current_user),
        s: Session = Depends(get_session),
    ):
        tid = _parse_id(todo_id)
        if tid is None:
            raise NotFound(TODO_NOT_FOUND)

        try:
            t = todo_store.update_owned_todo(s, user.id, tid, body.todo)
        except SQLAlchemyError as exc:
            s.rollback()
            logger.error("Error updating todo %s: %s", tid, exc)
            raise InternalError("Failed to update todo") from exc

        if t is None:
            raise NotFound(TODO_NOT_FOUND)
        return todo_store.to_out(t)

    @app.delete("/todos/{todo_id}", response_model=TodoEnvelope)
    def delete_todo(
        todo_id: str,
        user: CurrentUser = Depends(get_current_user),
        s: Session = Depends(get_session),
    ):
        tid = _parse_id(todo_id)
        deleted = todo_store.delete_owned_todo(s, user.id, tid) if tid is not None else None
        if deleted is None:
            raise NotFound(TODO_NOT_FOUND)
        return TodoEnvelope(todo=deleted)

    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        "todo_api.main:create_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )
