"""
Daybook API Server - REST API over the recorded timeline.
"""

import logging
from datetime import datetime
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from daybook import config, paths
from daybook.categories import CategoryCatalog, DuplicateCategory
from daybook.observability import CorrelationIdMiddleware
from daybook.timeline import (
    BlockManager,
    CurrentBlockStore,
    DateLocks,
    DayStore,
    DecodeFailure,
    InvalidBlock,
    IOFailure,
    NotFound,
    OverlapConflict,
    Reconciler,
    TimelineError,
)

from .models import HealthResponse
from .timeline_router import Services, router

logger = logging.getLogger(__name__)

# Most specific first: lookup walks this list in order
_ERROR_STATUS: list[tuple[type[TimelineError], int, str]] = [
    (OverlapConflict, 409, "overlap_conflict"),
    (DuplicateCategory, 409, "duplicate_category"),
    (NotFound, 404, "not_found"),
    (InvalidBlock, 422, "invalid_block"),
    (DecodeFailure, 500, "corrupt_record"),
    (IOFailure, 503, "storage_unavailable"),
]


def _status_for(exc: TimelineError) -> tuple[int, str]:
    for error_type, status, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status, code
    return 500, "timeline_error"


async def timeline_error_handler(request: Request, exc: TimelineError) -> JSONResponse:
    status, code = _status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", extra={"code": code})
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected ({code}): {exc}", extra={"code": code}
        )
    return JSONResponse(status_code=status, content={"error": code, "detail": str(exc)})


def build_services(root: Path, treat_corrupt_as_empty: bool = False) -> Services:
    store = DayStore(root, treat_corrupt_as_empty=treat_corrupt_as_empty)
    current_store = CurrentBlockStore(root)
    manager = BlockManager(store, current_store)
    return Services(
        store=store,
        current_store=current_store,
        catalog=CategoryCatalog(root),
        manager=manager,
        reconciler=Reconciler(manager, current_store),
        locks=DateLocks(),
    )


def create_app(
    data_root: Path | None = None,
    api_token: str | None = None,
    treat_corrupt_as_empty: bool | None = None,
) -> FastAPI:
    """
    Build the FastAPI app over one data root.

    Args:
        data_root: Directory holding the records. Defaults to paths.data_dir().
        api_token: Bearer token. Defaults to config.API_TOKEN.
        treat_corrupt_as_empty: Defaults to config.TREAT_CORRUPT_AS_EMPTY.
    """
    root = Path(data_root) if data_root is not None else paths.data_dir()
    if treat_corrupt_as_empty is None:
        treat_corrupt_as_empty = config.TREAT_CORRUPT_AS_EMPTY

    app = FastAPI(
        title="Daybook API",
        description="Record the day as contiguous labelled time blocks",
        version="1.0.0",
    )
    app.state.services = build_services(root, treat_corrupt_as_empty)
    app.state.api_token = api_token if api_token is not None else config.API_TOKEN

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(TimelineError, timeline_error_handler)
    app.include_router(router)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="healthy", timestamp=datetime.now().astimezone().isoformat())

    logger.info(f"Daybook data root: {root}")
    return app


# ==== Main ====


def main(host: str | None = None, port: int | None = None) -> None:
    """Run the server."""
    uvicorn.run(create_app(), host=host or config.HOST, port=port or config.PORT)


if __name__ == "__main__":
    main()
