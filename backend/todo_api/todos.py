from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Todo
from .schemas import TodoFields, TodoOut


def to_out(t: Todo) -> TodoOut:
    return TodoOut(id=t.id, userId=t.user_id, title=t.title, date=t.date, done=t.done)


def count_todos(s: Session, user_id: int) -> int:
    return int(s.execute(select(func.count()).select_from(Todo).where(Todo.user_id == user_id)).scalar_one())


def list_todos_page(s: Session, user_id: int, offset: int, limit: int) -> list[Todo]:
    # no ORDER BY: rows come back in whatever order the database keeps them
    q = select(Todo).where(Todo.user_id == user_id).offset(offset).limit(limit)
    return list(s.execute(q).scalars().all())


def insert_todo(s: Session, user_id: int, fields: TodoFields) -> Todo:
    t = Todo(user_id=user_id, title=fields.title, date=fields.date, done=fields.done)
    s.add(t)
    s.commit()
    s.refresh(t)
    return t


def _get_owned(s: Session, user_id: int, todo_id: int) -> Todo | None:
    return s.execute(select(Todo).where(Todo.id == todo_id, Todo.user_id == user_id)).scalars().first()


def update_owned_todo(s: Session, user_id: int, todo_id: int, fields: TodoFields) -> Todo | None:
    """Overwrite title, date and done of the caller's todo. None if no such todo."""
    t = _get_owned(s, user_id, todo_id)
    if t is None:
        return None
    t.title = fields.title
    t.date = fields.date
    t.done = fields.done
    s.add(t)
    s.commit()
    s.refresh(t)
    return t


def delete_owned_todo(s: Session, user_id: int, todo_id: int) -> TodoOut | None:
    """Delete the caller's todo and return what it held. None if no such todo."""
    t = _get_owned(s, user_id, todo_id)
    if t is None:
        return None
    # snapshot first; the row is gone once the commit lands
    out = to_out(t)
    s.delete(t)
    s.commit()
    return out
