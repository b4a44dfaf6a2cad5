"""Query outcomes.

Every store query a route runs ends in one of three outcomes:

  - ``Ok``: the query succeeded.
  - ``Degraded``: an enrichment query (heart rate, alerts, music, GPS, pace
    intervals) failed; the failure is logged and the route carries on with
    the fallback value, so one broken child table never hides the rest.
  - ``Fatal``: the query for the response's primary data failed;
    ``unwrap()`` raises ``UpstreamQueryError`` which the app turns into a 500.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pacebeats_admin.core.errors import UpstreamQueryError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_REQUIRED: Any = object()


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    cause: Exception

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Fatal:
    query: str
    cause: Exception

    def unwrap(self):
        raise UpstreamQueryError(self.query, self.cause)


Outcome = Union[Ok, Degraded, Fatal]


def run_query(db: Session, label: str, query: Callable[[], T], fallback: Any = _REQUIRED) -> Outcome:
    """Run `query` and classify the result.

    Without a `fallback` a failure is ``Fatal``; with one it is ``Degraded``.
    The session is rolled back after a failure so later queries in the same
    request still run on Postgres.
    """
    try:
        return Ok(query())
    except SQLAlchemyError as exc:
        db.rollback()
        if fallback is _REQUIRED:
            logger.error("%s query failed: %s", label, exc)
            return Fatal(label, exc)
        logger.warning("%s query failed, continuing without it: %s", label, exc)
        return Degraded(fallback, exc)


def required(db: Session, label: str, query: Callable[[], T]) -> T:
    return run_query(db, label, query).unwrap()


def optional(db: Session, label: str, query: Callable[[], T], fallback: T) -> T:
    return run_query(db, label, query, fallback).unwrap()
