from typing import List, Optional

from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.project import JoinRequest


class JoinRequestRepository(BaseRepository[JoinRequest]):

    def __init__(self, db: Session):
        super().__init__(db, JoinRequest)

    def find_pending(self, project_id: str, requester_id: str) -> Optional[JoinRequest]:
        return self.find_one_by(project_id=project_id, requester_id=requester_id, status="pending")

    def find_by_owner(self, owner_id: str) -> List[JoinRequest]:
        return (
            self.db.query(JoinRequest)
            .filter(JoinRequest.owner_id == owner_id)
            .order_by(JoinRequest.created_at.desc())
            .all()
        )

    def find_by_requester(self, requester_id: str, status: Optional[str] = None) -> List[JoinRequest]:
        query = self.db.query(JoinRequest).filter(JoinRequest.requester_id == requester_id)
        if status is not None:
            query = query.filter(JoinRequest.status == status)
        return query.order_by(JoinRequest.created_at.desc()).all()

    def find_by_project(self, project_id: str) -> List[JoinRequest]:
        return (
            self.db.query(JoinRequest)
            .filter(JoinRequest.project_id == project_id)
            .order_by(JoinRequest.created_at.desc())
            .all()
        )
