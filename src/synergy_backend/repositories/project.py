"""
Project repository.

Membership is stored as ordered ``ProjectMember`` rows keyed by e-mail,
matching how the chat guard checks access.
"""

from typing import List

from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.project import Project, ProjectMember


class ProjectRepository(BaseRepository[Project]):

    def __init__(self, db: Session):
        super().__init__(db, Project)

    def list_newest_first(self) -> List[Project]:
        return (
            self.db.query(Project)
            .order_by(Project.created_at.desc(), Project.id)
            .all()
        )

    def find_created_by(self, user_id: str) -> List[Project]:
        return (
            self.db.query(Project)
            .filter(Project.creator_id == user_id)
            .order_by(Project.created_at.desc())
            .all()
        )

    def find_joined_by(self, email: str) -> List[Project]:
        """Projects listing ``email`` as a member (ownership alone does not count)."""
        return (
            self.db.query(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .filter(ProjectMember.email == email)
            .order_by(Project.created_at.desc())
            .all()
        )

    def add_member(self, project: Project, email: str) -> Project:
        """Append ``email`` to the member list; adding an existing member is a no-op."""
        if email in project.members:
            return project
        position = len(project.memberships)
        project.memberships.append(ProjectMember(email=email, position=position))
        self.db.flush()
        return project
