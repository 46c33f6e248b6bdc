from sqlalchemy import (
    JSON, CheckConstraint, Column, DateTime, ForeignKey,
    Index, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from synergy_types.base import utc_now

from .base import Base, new_id


class Project(Base):
    __tablename__ = 'project'
    __table_args__ = (
        CheckConstraint("status IN ('active', 'completed')", name='ck_project_status'),
        Index('project_creator_idx', 'creator_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(255), nullable=False)
    skills = Column(JSON, nullable=False, default=list)
    timeline = Column(String(255))
    max_members = Column(Integer, nullable=False, default=5)
    status = Column(String(32), nullable=False, default="active")

    # Owner, denormalized name and e-mail are what the chat guard reads
    creator_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    creator = Column(String(255), nullable=False)
    creator_email = Column(String(320), nullable=False)

    # Relationships
    owner = relationship("User", back_populates="projects")
    memberships = relationship(
        "ProjectMember",
        back_populates="project",
        order_by="ProjectMember.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    join_requests = relationship("JoinRequest", back_populates="project", cascade="all, delete-orphan")

    @property
    def members(self) -> list[str]:
        """Member e-mails in join order."""
        return [membership.email for membership in self.memberships]

    @property
    def is_full(self) -> bool:
        return len(self.memberships) >= self.max_members


class ProjectMember(Base):
    __tablename__ = 'project_member'
    __table_args__ = (
        UniqueConstraint('project_id', 'email', name='project_member_project_email_key'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(ForeignKey('project.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    email = Column(String(320), nullable=False)
    position = Column(Integer, nullable=False)
    joined_at = Column(DateTime(True), nullable=False, default=utc_now)

    project = relationship("Project", back_populates="memberships")


class JoinRequest(Base):
    __tablename__ = 'join_request'
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'accepted', 'rejected')", name='ck_join_request_status'),
        Index('join_request_owner_idx', 'owner_id', 'created_at'),
        Index('join_request_requester_idx', 'requester_id', 'created_at'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    responded_at = Column(DateTime(True))
    status = Column(String(32), nullable=False, default="pending")
    message = Column(Text, nullable=False, default="")

    project_id = Column(ForeignKey('project.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    project_title = Column(String(255), nullable=False)

    # Requester snapshot taken when the request is created
    requester_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    requester_name = Column(String(255), nullable=False)
    requester_email = Column(String(320), nullable=False)
    requester_skills = Column(JSON, nullable=False, default=list)
    requester_college = Column(String(255))

    owner_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    owner_email = Column(String(320), nullable=False)

    project = relationship("Project", back_populates="join_requests")
