from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from synergy_types.auth import Identity
from synergy_types.projects import (
    JoinRequestCreate,
    JoinRequestGet,
    JoinRequestRespond,
    JoinRequestResult,
    JoinRequestStatus,
)
from synergy_backend.business_logic.join_requests import (
    create_join_request,
    delete_join_request,
    list_owner_requests,
    list_project_requests,
    list_requester_requests,
    respond_to_join_request,
)
from synergy_backend.database import get_db
from synergy_backend.permissions.auth import get_current_identity

join_requests_router = APIRouter()


@join_requests_router.post("/request/{project_id}", response_model=JoinRequestResult, status_code=status.HTTP_201_CREATED)
async def request_to_join(
    project_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    payload: Optional[JoinRequestCreate] = None,
    db: Session = Depends(get_db),
):
    return await create_join_request(identity, project_id, payload or JoinRequestCreate(), db)


@join_requests_router.get("/owner", response_model=List[JoinRequestGet])
async def list_received_requests(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    """Requests for projects owned by the caller, newest first."""
    return await list_owner_requests(identity, db)


@join_requests_router.get("/requester", response_model=List[JoinRequestGet])
async def list_sent_requests(
    identity: Annotated[Identity, Depends(get_current_identity)],
    status: Optional[JoinRequestStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """Requests sent by the caller, optionally filtered by status."""
    return await list_requester_requests(identity, db, status=status)


@join_requests_router.get("/project/{project_id}", response_model=List[JoinRequestGet])
async def list_requests_for_project(
    project_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    return await list_project_requests(identity, project_id, db)


@join_requests_router.put("/respond/{request_id}", response_model=JoinRequestResult)
async def respond(
    request_id: str,
    payload: JoinRequestRespond,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    return await respond_to_join_request(identity, request_id, payload, db)


@join_requests_router.delete("/{request_id}")
async def delete_request(
    request_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    return await delete_join_request(identity, request_id, db)
