"""FastAPI application factory for ``mlm serve``.

Only a liveness check for now.  Run with ``mlm serve`` rather than
pointing uvicorn at this module: the factory needs the configured
database handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, FastAPI
from fastapi.responses import PlainTextResponse

from mlm import __version__

if TYPE_CHECKING:
    from mlm.infrastructure.app_db import AppDatabase

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
def health() -> str:
    return "OK"


def create_app(db: AppDatabase | None = None) -> FastAPI:
    """Build the app; *db* is kept on ``app.state.db`` for route handlers."""
    app = FastAPI(title="mlm", version=__version__)
    app.state.db = db
    app.include_router(router)
    return app
