"""Propagate the acting studio through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar
from uuid import UUID

_current_studio_id: ContextVar[UUID | None] = ContextVar("current_studio_id", default=None)


def get_current_studio_id() -> UUID:
    """
    Get current studio ID from context.

    Raises RuntimeError if no studio context is set. Every invoice and
    payment belongs to exactly one studio, so studio-scoped code running
    without one is a bug.
    """
    studio_id = _current_studio_id.get()
    if studio_id is None:
        raise RuntimeError(
            "No studio context set. This usually means you're calling "
            "studio-scoped code outside of a request."
        )
    return studio_id


def set_current_studio_id(studio_id: UUID) -> None:
    """Set current studio ID in context. Called by the studio middleware."""
    _current_studio_id.set(studio_id)


def clear_current_studio_id() -> None:
    """
    Clear studio context.

    Must be called in a finally block to prevent context leakage.
    """
    _current_studio_id.set(None)


@contextmanager
def studio_context(studio_id: UUID):
    """
    Context manager for temporarily setting studio context.

    Example:
        with studio_context(studio_id):
            invoices = invoice_service.find()
    """
    previous = _current_studio_id.get()
    set_current_studio_id(studio_id)
    try:
        yield
    finally:
        if previous is None:
            clear_current_studio_id()
        else:
            set_current_studio_id(previous)
