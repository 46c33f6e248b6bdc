"""Business logic for projects."""

import logging
from typing import List

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from synergy_types.auth import Identity
from synergy_types.projects import ProjectCreate, ProjectGet, UserProjects
from synergy_backend.exceptions import ProjectNotFoundException
from synergy_backend.model.project import Project
from synergy_backend.repositories import ProjectRepository
from synergy_backend.settings import settings

logger = logging.getLogger(__name__)


def _list_projects(db: Session) -> List[ProjectGet]:
    return [ProjectGet.model_validate(p) for p in ProjectRepository(db).list_newest_first()]


def _create_project(identity: Identity, payload: ProjectCreate, db: Session) -> ProjectGet:
    """Create a project owned by the caller. The owner is not added to ``members``."""
    project = ProjectRepository(db).create(Project(
        title=payload.title,
        description=payload.description,
        category=payload.category,
        skills=list(payload.skills),
        timeline=payload.timeline,
        max_members=payload.max_members or settings.PROJECT_DEFAULT_MAX_MEMBERS,
        status="active",
        creator_id=identity.id,
        creator=identity.name,
        creator_email=identity.email,
    ))

    logger.info(f"User {identity.id} created project {project.id}")
    return ProjectGet.model_validate(project)


def _get_project(project_id: str, db: Session) -> ProjectGet:
    project = ProjectRepository(db).get_by_id_optional(project_id)
    if project is None:
        raise ProjectNotFoundException()
    return ProjectGet.model_validate(project)


def _get_user_projects(identity: Identity, db: Session) -> UserProjects:
    repo = ProjectRepository(db)
    return UserProjects(
        created=[ProjectGet.model_validate(p) for p in repo.find_created_by(identity.id)],
        joined=[ProjectGet.model_validate(p) for p in repo.find_joined_by(identity.email)],
    )


# Async entry points for the routers; the work runs in the threadpool

async def list_projects(db: Session) -> List[ProjectGet]:
    return await run_in_threadpool(_list_projects, db)


async def create_project(identity: Identity, payload: ProjectCreate, db: Session) -> ProjectGet:
    return await run_in_threadpool(_create_project, identity, payload, db)


async def get_project(project_id: str, db: Session) -> ProjectGet:
    return await run_in_threadpool(_get_project, project_id, db)


async def get_user_projects(identity: Identity, db: Session) -> UserProjects:
    return await run_in_threadpool(_get_user_projects, identity, db)
