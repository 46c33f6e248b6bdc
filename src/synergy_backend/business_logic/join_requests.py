"""
Business logic for join requests.

A request snapshots the requester's profile when it is created. Only the
project owner may answer it, and only while it is pending.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from synergy_types.auth import Identity
from synergy_types.base import utc_now
from synergy_types.projects import (
    JoinRequestCreate,
    JoinRequestGet,
    JoinRequestRespond,
    JoinRequestResult,
    JoinRequestStatus,
)
from synergy_backend.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    JoinRequestNotFoundException,
    ProjectFullException,
    ProjectNotFoundException,
    UserNotFoundException,
)
from synergy_backend.model.project import JoinRequest
from synergy_backend.repositories import JoinRequestRepository, ProjectRepository, UserRepository

logger = logging.getLogger(__name__)


def _create_join_request(
    identity: Identity,
    project_id: str,
    payload: JoinRequestCreate,
    db: Session,
) -> JoinRequestResult:
    """
    Ask to join a project.

    Raises:
        ProjectNotFoundException: Unknown project
        ProjectFullException: Member limit reached
        BadRequestException: Caller is already a member or owns the project
        ConflictException: A pending request already exists
    """
    project = ProjectRepository(db).get_by_id_optional(project_id)
    if project is None:
        raise ProjectNotFoundException()

    requester = UserRepository(db).get_by_id_optional(identity.id)
    if requester is None:
        raise UserNotFoundException()

    if project.is_full:
        raise ProjectFullException(detail="Project is full")

    if requester.email in project.members:
        raise BadRequestException(detail="You are already a member of this project")

    if project.creator_id == requester.id:
        raise BadRequestException(detail="You cannot request to join your own project")

    repo = JoinRequestRepository(db)
    if repo.find_pending(project.id, requester.id) is not None:
        raise ConflictException(detail="You already have a pending request for this project")

    request = repo.create(JoinRequest(
        project_id=project.id,
        project_title=project.title,
        requester_id=requester.id,
        requester_name=requester.name,
        requester_email=requester.email,
        requester_skills=list(requester.skills or []),
        requester_college=requester.college,
        message=payload.message,
        status="pending",
        owner_id=project.creator_id,
        owner_email=project.creator_email,
    ))

    logger.info(f"User {requester.id} requested to join project {project.id}")
    return JoinRequestResult(
        message="Join request sent successfully",
        request=JoinRequestGet.model_validate(request),
    )


def _list_owner_requests(identity: Identity, db: Session) -> List[JoinRequestGet]:
    return [JoinRequestGet.model_validate(r) for r in JoinRequestRepository(db).find_by_owner(identity.id)]


def _list_requester_requests(
    identity: Identity,
    db: Session,
    status: Optional[JoinRequestStatus] = None,
) -> List[JoinRequestGet]:
    requests = JoinRequestRepository(db).find_by_requester(identity.id, status=status)
    return [JoinRequestGet.model_validate(r) for r in requests]


def _list_project_requests(identity: Identity, project_id: str, db: Session) -> List[JoinRequestGet]:
    project = ProjectRepository(db).get_by_id_optional(project_id)
    if project is None:
        raise ProjectNotFoundException()

    if project.creator_id != identity.id:
        raise ForbiddenException(detail="Only the project owner can view join requests")

    return [JoinRequestGet.model_validate(r) for r in JoinRequestRepository(db).find_by_project(project_id)]


def _respond_to_join_request(
    identity: Identity,
    request_id: str,
    payload: JoinRequestRespond,
    db: Session,
) -> JoinRequestResult:
    """
    Accept or reject a pending request.

    Accepting a request for a project that filled up in the meantime
    rejects it instead.
    """
    repo = JoinRequestRepository(db)
    request = repo.get_by_id_optional(request_id)
    if request is None:
        raise JoinRequestNotFoundException()

    if request.owner_id != identity.id:
        raise ForbiddenException(detail="Only the project owner can respond to join requests")

    if request.status != "pending":
        raise BadRequestException(detail="Join request has already been processed")

    projects = ProjectRepository(db)
    project = projects.get_by_id_optional(request.project_id)
    if project is None:
        raise ProjectNotFoundException()

    status = payload.status
    message = f"Join request {status}"

    if status == "accepted":
        if project.is_full:
            status = "rejected"
            message = "Project is full, join request rejected"
        else:
            projects.add_member(project, request.requester_email)

    repo.update(request, status=status, responded_at=utc_now())

    logger.info(f"Join request {request.id} for project {project.id}: {status}")
    return JoinRequestResult(message=message, request=JoinRequestGet.model_validate(request))


def _delete_join_request(identity: Identity, request_id: str, db: Session) -> dict:
    repo = JoinRequestRepository(db)
    request = repo.get_by_id_optional(request_id)
    if request is None:
        raise JoinRequestNotFoundException()

    if identity.id not in (request.requester_id, request.owner_id):
        raise ForbiddenException(detail="Not authorized to delete this join request")

    repo.delete(request)

    logger.info(f"Join request {request_id} deleted by user {identity.id}")
    return {"message": "Join request deleted successfully"}


# Async entry points for the routers; the work runs in the threadpool

async def create_join_request(
    identity: Identity,
    project_id: str,
    payload: JoinRequestCreate,
    db: Session,
) -> JoinRequestResult:
    return await run_in_threadpool(_create_join_request, identity, project_id, payload, db)


async def list_owner_requests(identity: Identity, db: Session) -> List[JoinRequestGet]:
    return await run_in_threadpool(_list_owner_requests, identity, db)


async def list_requester_requests(
    identity: Identity,
    db: Session,
    status: Optional[JoinRequestStatus] = None,
) -> List[JoinRequestGet]:
    return await run_in_threadpool(_list_requester_requests, identity, db, status)


async def list_project_requests(identity: Identity, project_id: str, db: Session) -> List[JoinRequestGet]:
    return await run_in_threadpool(_list_project_requests, identity, project_id, db)


async def respond_to_join_request(
    identity: Identity,
    request_id: str,
    payload: JoinRequestRespond,
    db: Session,
) -> JoinRequestResult:
    return await run_in_threadpool(_respond_to_join_request, identity, request_id, payload, db)


async def delete_join_request(identity: Identity, request_id: str, db: Session) -> dict:
    return await run_in_threadpool(_delete_join_request, identity, request_id, db)
