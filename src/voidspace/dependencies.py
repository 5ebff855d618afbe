"""Shared FastAPI dependencies."""

from fastapi import Depends, Request

from voidspace.config import Settings
from voidspace.progression.context import ProgressionContext
from voidspace.progression.storage import KeyValueStore


def get_store(request: Request) -> KeyValueStore:
    """The key-value store created at startup."""
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_context(
    account_id: str,
    store: KeyValueStore = Depends(get_store),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> ProgressionContext:
    """A freshly hydrated context for the account in the path."""
    ctx = ProgressionContext(store, account_id, prefix=settings.namespace_prefix)
    ctx.load()
    return ctx
