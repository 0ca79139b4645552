from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends

from ..models import FocusEntry
from ..repositories import Repository, get_repository
from ..schemas import FocusEntryCreate, FocusEntryOut, StatsOut
from ..utils import compute_stats, filter_by_status

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/focus",
    tags=["focus"],
)


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _to_out(entry: FocusEntry) -> FocusEntryOut:
    return FocusEntryOut(**asdict(entry))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/newEntry",
    response_model=FocusEntryOut,
    summary="Create Entry",
    description="Log a new focus attempt. createdAt is assigned by the server when omitted.",
    responses={
        200: {"description": "Entry stored"},
        422: {"description": "Validation error"},
    },
)
def create_entry(payload: FocusEntryCreate, repo: Repository = Depends(_get_repo)) -> FocusEntryOut:
    """
    Persist a new focus entry and return it with its id and createdAt.
    """
    saved = repo.save(payload.to_entity())
    logger.info("Stored focus entry %s (status=%s, category=%s)", saved.id, saved.status, saved.category)
    return _to_out(saved)


# PUBLIC_INTERFACE
@router.get(
    "/entries",
    response_model=List[FocusEntryOut],
    summary="List Entries",
    description="Return every stored focus entry, unfiltered.",
)
def list_entries(repo: Repository = Depends(_get_repo)) -> List[FocusEntryOut]:
    return [_to_out(e) for e in repo.find_all()]


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=StatsOut,
    summary="Entry Statistics",
    description=(
        "Aggregate statistics over all entries.\n\n"
        "- total: number of entries\n"
        "- successes: entries with status true\n"
        "- failures: total - successes\n"
        "- successRate: successes * 100 / total, or 0.0 when there are no entries"
    ),
)
def get_stats(repo: Repository = Depends(_get_repo)) -> StatsOut:
    """
    Compute statistics from a single snapshot of the stored entries.
    """
    return StatsOut(**compute_stats(repo.find_all()))


# PUBLIC_INTERFACE
@router.get(
    "/success",
    response_model=List[FocusEntryOut],
    summary="List Successful Entries",
    description="Return the entries whose status is true.",
)
def list_successes(repo: Repository = Depends(_get_repo)) -> List[FocusEntryOut]:
    return [_to_out(e) for e in filter_by_status(repo.find_all(), True)]


# PUBLIC_INTERFACE
@router.get(
    "/failure",
    response_model=List[FocusEntryOut],
    summary="List Failed Entries",
    description="Return the entries whose status is false.",
)
def list_failures(repo: Repository = Depends(_get_repo)) -> List[FocusEntryOut]:
    return [_to_out(e) for e in filter_by_status(repo.find_all(), False)]


# Registered last so the static paths above never parse as ids
# PUBLIC_INTERFACE
@router.get(
    "/{entry_id}",
    response_model=Optional[FocusEntryOut],
    summary="Get Entry",
    description="Get a single focus entry by ID. Unknown ids return null rather than 404.",
    responses={
        200: {"description": "The entry, or null when no entry has this id"},
    },
)
def get_entry(entry_id: int, repo: Repository = Depends(_get_repo)) -> Optional[FocusEntryOut]:
    """
    Retrieve a single focus entry by its ID.
    """
    item = repo.find_by_id(entry_id)
    if item is None:
        return None
    return _to_out(item)
