"""
Timeline API Router.

Endpoints:
- GET  /state                 - categories, a day's blocks and the current block
- GET  /blocktype/get         - category catalog
- POST /blocktype/new         - add a category
- GET  /timeblock/get         - one day's blocks
- POST /timeblock/append      - append a block
- POST /timeblock/next        - close the running block, switch current block
- POST /timeblock/split       - split a block in two
- POST /timeblock/adjust      - move a block's bounds, dragging neighbours
- GET  /currentblock/get      - current block
- POST /currentblock/change   - replace current block
- GET  /analysis              - time per category over a date range
- POST /sync                  - merge an offline client's timeline

Mutations hold the per-date locks of every date they may touch.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from daybook.analysis import build_analysis
from daybook.categories import CategoryCatalog
from daybook.timeline import (
    BlockManager,
    CurrentBlockStore,
    DateLocks,
    DayStore,
    Reconciler,
    storage_key_for,
)

from .auth import require_auth
from .models import (
    AdjustRequest,
    BlockModel,
    CategoryModel,
    CurrentBlockModel,
    MutationResponse,
    NewCategoryRequest,
    SplitRequest,
    StateResponse,
    SyncDateResult,
    SyncRequest,
    SyncResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["timeline"], dependencies=[Depends(require_auth)])


@dataclass
class Services:
    """Per-app collaborators, built once in create_app."""

    store: DayStore
    current_store: CurrentBlockStore
    catalog: CategoryCatalog
    manager: BlockManager
    reconciler: Reconciler
    locks: DateLocks


def get_services(request: Request) -> Services:
    return request.app.state.services


def _today() -> date:
    return datetime.now().astimezone().date()


def _block_days(start: datetime, end: datetime) -> set[date]:
    """Records a block may touch: its end date, plus its start date when crossing midnight."""
    return {start.date(), storage_key_for(end)}


# ==== State ====


@router.get("/state", response_model=StateResponse)
def get_state(
    day: date | None = Query(default=None, alias="date"),
    services: Services = Depends(get_services),
) -> StateResponse:
    day = day or _today()
    logger.info(f"Getting state for {day.isoformat()}")
    return StateResponse(
        date=day,
        blocktypes=[CategoryModel.from_category(c) for c in services.catalog.load()],
        daydata=[BlockModel.from_block(b) for b in services.store.read(day)],
        currentblock=CurrentBlockModel.from_current(services.current_store.get_or_default()),
    )


# ==== Categories ====


@router.get("/blocktype/get", response_model=list[CategoryModel])
def get_blocktypes(services: Services = Depends(get_services)) -> list[CategoryModel]:
    return [CategoryModel.from_category(c) for c in services.catalog.load()]


@router.post("/blocktype/new", response_model=CategoryModel)
def new_blocktype(
    body: NewCategoryRequest, services: Services = Depends(get_services)
) -> CategoryModel:
    category = services.catalog.add(body.name, body.color.to_color())
    logger.info(f"Added category {category.id} ({category.name})")
    return CategoryModel.from_category(category)


# ==== Blocks ====


@router.get("/timeblock/get", response_model=list[BlockModel])
def get_daydata(
    day: date = Query(..., alias="date"), services: Services = Depends(get_services)
) -> list[BlockModel]:
    return [BlockModel.from_block(b) for b in services.store.read(day)]


@router.post("/timeblock/append", response_model=MutationResponse)
def append_timeblock(
    body: BlockModel, services: Services = Depends(get_services)
) -> MutationResponse:
    block = body.to_block()
    with services.locks.hold(_block_days(block.start, block.end)):
        stored = services.manager.append(block)
    return MutationResponse(blocks=[BlockModel.from_block(b) for b in stored])


@router.post("/timeblock/next", response_model=MutationResponse)
def next_timeblock(
    body: CurrentBlockModel, services: Services = Depends(get_services)
) -> MutationResponse:
    now = datetime.now().astimezone()
    with services.locks.hold({now.date(), now.date() - timedelta(days=1)}):
        stored = services.manager.next_block(body.to_current(), now=now)
    return MutationResponse(blocks=[BlockModel.from_block(b) for b in stored])


@router.post("/timeblock/split", response_model=MutationResponse)
def split_timeblock(
    body: SplitRequest, services: Services = Depends(get_services)
) -> MutationResponse:
    logger.info(f"Splitting block {body.start_time.isoformat()} at {body.split_time.isoformat()}")
    with services.locks.hold({storage_key_for(body.end_time)}):
        pieces = services.manager.split(
            body.start_time,
            body.end_time,
            body.split_time,
            before=body.before.as_tuple(),
            after=body.after.as_tuple(),
        )
    return MutationResponse(blocks=[BlockModel.from_block(b) for b in pieces])


@router.post("/timeblock/adjust", response_model=MutationResponse)
def adjust_timeblock(
    body: AdjustRequest, services: Services = Depends(get_services)
) -> MutationResponse:
    with services.locks.hold({storage_key_for(body.end_time)}):
        block = services.manager.adjust(
            body.start_time,
            body.end_time,
            body.new_start_time,
            body.new_end_time,
            body.block_type_id,
            body.title,
        )
    return MutationResponse(blocks=[BlockModel.from_block(block)])


# ==== Current block ====


@router.get("/currentblock/get", response_model=CurrentBlockModel)
def get_current_block(services: Services = Depends(get_services)) -> CurrentBlockModel:
    return CurrentBlockModel.from_current(services.current_store.get_or_default())


@router.post("/currentblock/change", response_model=CurrentBlockModel)
def change_current_block(
    body: CurrentBlockModel, services: Services = Depends(get_services)
) -> CurrentBlockModel:
    logger.info(f"Changing current block to {body.block_type_id} ({body.current_block_name})")
    services.current_store.save(body.to_current())
    return body


# ==== Analysis ====


@router.get("/analysis")
def get_analysis(
    start: date = Query(...),
    end: date = Query(...),
    services: Services = Depends(get_services),
) -> dict:
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")
    logger.info(f"Getting analysis from {start.isoformat()} to {end.isoformat()}")
    return build_analysis(services.store, services.catalog, start, end).to_dict()


# ==== Sync ====


@router.post("/sync", response_model=SyncResponse)
def sync(body: SyncRequest, services: Services = Depends(get_services)) -> SyncResponse:
    incoming = {day: [b.to_block() for b in blocks] for day, blocks in body.timeblocks.items()}
    touched = set()
    for day, blocks in incoming.items():
        touched.update({day, day + timedelta(days=1)})
        for block in blocks:
            touched.update(_block_days(block.start, block.end))

    added = services.catalog.merge([c.to_category() for c in body.blocktypes])
    with services.locks.hold(touched):
        report = services.reconciler.reconcile(incoming, body.currentblock.to_current())

    return SyncResponse(
        appended=report.appended,
        dropped=report.dropped,
        blocktypes_added=len(added),
        dates=[
            SyncDateResult(
                date=outcome.day,
                appended=outcome.appended,
                dropped=outcome.dropped,
                filler=BlockModel.from_block(outcome.filler) if outcome.filler else None,
            )
            for outcome in report.dates
        ],
    )
