"""Atomic scope shared by the DB repositories.

Repositories commit after each write unless an atomic scope is open on the
session, in which case they only flush and the scope commits once at the end.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlmodel import Session

_ATOMIC_KEY = "leaderboard_service.atomic"


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    if session.info.get(_ATOMIC_KEY):
        # nested scope joins the outer one
        yield session
        return

    session.info[_ATOMIC_KEY] = True
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.info.pop(_ATOMIC_KEY, None)


def commit(session: Session) -> None:
    if session.info.get(_ATOMIC_KEY):
        session.flush()
    else:
        session.commit()
