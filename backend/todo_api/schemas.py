from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, field_validator


def _utf8(v: str) -> str:
    # lone surrogates from JSON escapes cannot be hashed or stored
    v.encode("utf-8")
    return v


class CredentialsIn(BaseModel):
    # presence is checked by the handlers so the 400 carries a readable message
    email: str | None = None
    password: str | None = None

    @field_validator("email", "password")
    @classmethod
    def _encodable(cls, v: str | None) -> str | None:
        return v if v is None else _utf8(v)


class TodoFields(BaseModel):
    # userId / user_id and any other extra keys are dropped
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    date: str | None = None
    done: bool | None = None

    @field_validator("title", "date", mode="before")
    @classmethod
    def _as_text(cls, v):
        if v is None:
            return None
        return _utf8(v if isinstance(v, str) else json.dumps(v))

    @field_validator("done", mode="before")
    @classmethod
    def _truthy(cls, v):
        return v if v is None else bool(v)


class TodoCreate(BaseModel):
    todo: TodoFields | None = None


class TodoUpdate(BaseModel):
    todo: TodoFields


class TodoOut(BaseModel):
    id: int
    userId: int
    title: str | None = None
    date: str | None = None
    done: bool | None = None


class PageMeta(BaseModel):
    total: int
    pages: int
    pageSize: int
    page: int


class TodoListOut(BaseModel):
    todos: list[TodoOut]
    meta: PageMeta


class TodoEnvelope(BaseModel):
    todo: TodoOut


class TokenOut(BaseModel):
    token: str


class MessageOut(BaseModel):
    message: str
