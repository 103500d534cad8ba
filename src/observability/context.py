"""Run context: session metadata merged into every log record.

A run is started once (per process, job or request) and stays current
until the next start_run(). There is no merging or stacking: the latest
start_run() replaces the previous run entirely.

Storage is a ContextVar, so plain synchronous code sees the last run set
in its thread, asyncio tasks inherit the run current when they were
created, and tests can isolate themselves with reset_run() or run_scope().

A new threading.Thread starts with an empty context and sees no run. Hand
the run to a worker explicitly:

    ctx = contextvars.copy_context()
    threading.Thread(target=ctx.run, args=(worker,)).start()
"""

import contextvars
import uuid
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Optional, Union

from .schema import F

_run_context: contextvars.ContextVar[Optional["RunContext"]] = \
    contextvars.ContextVar("logdoc_run_context", default=None)


@dataclass(frozen=True)
class RunContext:
    """Metadata identifying the current run.

    Attributes:
        run_id: Opaque run identifier (required)
        model: Model name the run uses
        session_id: Session identifier
        user_id: User identifier
        tags: Ordered free-form tags
    """
    run_id: str
    model: Optional[str] = None
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    tags: Optional[tuple[str, ...]] = None

    def __post_init__(self):
        if not self.run_id:
            raise ValueError("run_id is required")
        if self.tags is not None and not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))

    @classmethod
    def create(
        cls,
        model: Optional[str] = None,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> "RunContext":
        """Create a run with a generated run_ prefixed id."""
        return cls(
            run_id=f"run_{uuid.uuid4().hex[:12]}",
            model=model,
            session_id=session_id,
            user_id=user_id,
            tags=tuple(tags) if tags is not None else None,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunContext":
        tags = data.get(F.TAGS)
        return cls(
            run_id=data.get(F.RUN_ID, ""),
            model=data.get(F.MODEL),
            session_id=data.get(F.SESSION_ID),
            user_id=data.get(F.USER_ID),
            tags=tuple(tags) if tags is not None else None,
        )

    def to_fields(self) -> dict[str, Any]:
        """Record fields for this run; unset fields are None."""
        return {
            F.RUN_ID: self.run_id,
            F.MODEL: self.model,
            F.SESSION_ID: self.session_id,
            F.USER_ID: self.user_id,
            F.TAGS: list(self.tags) if self.tags is not None else None,
        }


def start_run(meta: Union[RunContext, Mapping[str, Any]]) -> contextvars.Token:
    """Make ``meta`` the current run, replacing any previous one.

    Args:
        meta: RunContext or mapping with run_id and optional fields

    Returns:
        Token that reset_run() accepts to restore the previous run

    Raises:
        ValueError: If run_id is missing or empty
    """
    run = meta if isinstance(meta, RunContext) else RunContext.from_dict(meta)
    return _run_context.set(run)


def current_run() -> Optional[RunContext]:
    """Return the current run or None if no run was started."""
    return _run_context.get()


def reset_run(token: Optional[contextvars.Token] = None) -> None:
    """Restore the run before ``token`` was issued, or clear it if no token."""
    if token is None:
        _run_context.set(None)
    else:
        _run_context.reset(token)


@contextmanager
def run_scope(meta: Union[RunContext, Mapping[str, Any]]) -> Iterator[RunContext]:
    """Context manager making ``meta`` current for the duration of a block.

    Usage:
        with run_scope({"run_id": "nightly-42"}) as run:
            log_event("job.start")
    """
    token = start_run(meta)
    try:
        yield current_run()
    finally:
        reset_run(token)
