"""API routes.

Every route except ``/health`` resolves the caller through the
authorization gate before reading its body.  The store, engine and
aggregators are synchronous, so handlers run them through
``run_in_threadpool`` to keep disk I/O and retry waits off the event
loop.  Engine errors propagate as ``EconfError`` and are turned into
JSON responses by the handlers registered in ``app.py``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import Field, ValidationError

from ..auth import AuthContext
from ..conferences import (
    ConferenceChanges,
    ConferenceForm,
    create_conference,
    get_conference,
    list_conferences,
    organizer_overview,
    update_conference,
)
from ..core.errors import Forbidden, InvalidArgument
from ..core.models import CamelModel, Role
from ..dashboard import build_summary
from ..papers import AssignmentEngine, list_author_papers, list_reviewer_papers
from ..reviewer.status import Decision
from ..store import DocumentStore
from ..users import update_profile
from .deps import current_user, get_engine, get_store, read_json_object, require_roles

router = APIRouter()


class PaperSubmission(CamelModel):
    """Body of ``POST /papers``."""

    title: str
    conference_id: str = Field(..., min_length=1)


class StatusChange(CamelModel):
    paper_id: str = Field(..., min_length=1)
    status: Decision
    feedback: Optional[str] = None


class ReviewerChange(CamelModel):
    paper_id: str = Field(..., min_length=1)
    reviewer_ids: List[str]


class ProfileChange(CamelModel):
    name: Optional[str] = None
    role: Optional[str] = None


def _parse(model, body: Dict[str, Any], message: str):
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise InvalidArgument(message) from exc


def _try_parse(model, body: Dict[str, Any]):
    try:
        return model.model_validate(body)
    except ValidationError:
        return None


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


# Papers


@router.post("/papers", status_code=status.HTTP_201_CREATED)
async def submit_paper(
    request: Request,
    ctx: AuthContext = Depends(current_user),
    engine: AssignmentEngine = Depends(get_engine),
) -> Dict[str, Any]:
    """Submit a paper; reviewers are assigned automatically."""
    body = await read_json_object(request, "Invalid paper payload.")
    submission = _parse(PaperSubmission, body, "Invalid paper payload.")
    paper = await run_in_threadpool(
        engine.create_paper, submission.title, submission.conference_id, ctx.uid, ctx.role
    )
    return {"success": True, "id": paper.id}


@router.patch("/papers")
async def change_paper(
    request: Request,
    ctx: AuthContext = Depends(current_user),
    engine: AssignmentEngine = Depends(get_engine),
) -> Dict[str, Any]:
    """Reviewer status update or organizer reassignment, chosen by body shape.

    A body that parses as a status change is one, even if it also names
    ``reviewerIds``; only bodies that fail that shape are tried as a
    reassignment.
    """
    body = await read_json_object(request, "Invalid update payload.")
    status_change = _try_parse(StatusChange, body)
    reviewer_change = _try_parse(ReviewerChange, body)
    if status_change is not None:
        await run_in_threadpool(
            engine.update_status,
            status_change.paper_id,
            status_change.status,
            ctx.uid,
            ctx.role,
            status_change.feedback,
        )
    elif reviewer_change is not None:
        await run_in_threadpool(
            engine.reassign, reviewer_change.paper_id, reviewer_change.reviewer_ids, ctx.uid, ctx.role
        )
    else:
        raise InvalidArgument("Invalid update payload.")
    return {"success": True}


@router.get("/papers")
async def list_papers(
    scope: Optional[str] = None,
    ctx: AuthContext = Depends(current_user),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    """Papers the caller authored or reviews; ``scope`` defaults to the caller's role."""
    scope = scope or ctx.role.value
    if scope == Role.AUTHOR.value:
        if ctx.role != Role.AUTHOR:
            raise Forbidden()
        items = await run_in_threadpool(list_author_papers, store, ctx.uid)
    elif scope == Role.REVIEWER.value:
        if ctx.role != Role.REVIEWER:
            raise Forbidden()
        items = await run_in_threadpool(list_reviewer_papers, store, ctx.uid)
    else:
        raise InvalidArgument("Unsupported scope.")
    return {"papers": [_dump(item) for item in items]}


# Dashboard


@router.get("/dashboard")
async def dashboard(
    ctx: AuthContext = Depends(current_user),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    return _dump(await run_in_threadpool(build_summary, store, ctx.uid, ctx.role))


# Conferences


@router.get("/conferences")
async def conferences(
    scope: Optional[str] = None,
    ctx: AuthContext = Depends(current_user),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    """All conferences, or with ``scope=organizer`` the caller's management view."""
    if scope is None:
        listed = await run_in_threadpool(list_conferences, store)
        return {"conferences": [_dump(c) for c in listed]}
    if scope == Role.ORGANIZER.value:
        if ctx.role != Role.ORGANIZER:
            raise Forbidden()
        return _dump(await run_in_threadpool(organizer_overview, store, ctx.uid))
    raise InvalidArgument("Unsupported scope.")


@router.post("/conferences", status_code=status.HTTP_201_CREATED)
async def new_conference(
    request: Request,
    ctx: AuthContext = Depends(require_roles(Role.ORGANIZER)),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    body = await read_json_object(request, "Invalid conference payload.")
    form = _parse(ConferenceForm, body, "Invalid conference payload.")
    return _dump(await run_in_threadpool(create_conference, store, form, ctx.uid, ctx.role))


@router.get("/conferences/{conference_id}")
async def conference_detail(
    conference_id: str,
    ctx: AuthContext = Depends(current_user),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    return _dump(await run_in_threadpool(get_conference, store, conference_id))


@router.patch("/conferences/{conference_id}")
async def edit_conference(
    conference_id: str,
    request: Request,
    ctx: AuthContext = Depends(require_roles(Role.ORGANIZER)),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    body = await read_json_object(request, "Invalid conference payload.")
    changes = _parse(ConferenceChanges, body, "Invalid conference payload.")
    conference = await run_in_threadpool(update_conference, store, conference_id, changes, ctx.uid, ctx.role)
    return _dump(conference)


# Users


@router.get("/users/me")
async def my_profile(ctx: AuthContext = Depends(current_user)) -> Dict[str, Any]:
    return _dump(ctx.profile)


@router.patch("/users/me")
async def edit_my_profile(
    request: Request,
    ctx: AuthContext = Depends(current_user),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    body = await read_json_object(request, "Invalid user data.")
    change = _parse(ProfileChange, body, "Invalid user data.")
    profile = await run_in_threadpool(update_profile, store, ctx.uid, name=change.name, role=change.role)
    return _dump(profile)
