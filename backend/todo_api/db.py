from __future__ import annotations

from sqlalchemy import create_engine


def get_engine(url: str):
    if not url:
        raise RuntimeError("DATABASE_URL is required")
    connect_args = {}
    if url.startswith("sqlite"):
        # sync handlers run on the threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)
