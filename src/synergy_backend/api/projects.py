from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from synergy_types.auth import Identity
from synergy_types.projects import ProjectCreate, ProjectGet, UserProjects
from synergy_backend.business_logic.projects import (
    create_project,
    get_project,
    get_user_projects,
    list_projects,
)
from synergy_backend.database import get_db
from synergy_backend.permissions.auth import get_current_identity

projects_router = APIRouter()


@projects_router.get("", response_model=List[ProjectGet])
async def list_all_projects(db: Session = Depends(get_db)):
    """All projects, newest first."""
    return await list_projects(db)


@projects_router.post("", response_model=ProjectGet, status_code=status.HTTP_201_CREATED)
async def create_new_project(
    payload: ProjectCreate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    return await create_project(identity, payload, db)


@projects_router.get("/mine", response_model=UserProjects)
async def list_my_projects(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    """Projects the caller created and projects listing the caller as a member."""
    return await get_user_projects(identity, db)


@projects_router.get("/{project_id}", response_model=ProjectGet)
async def get_single_project(project_id: str, db: Session = Depends(get_db)):
    return await get_project(project_id, db)
