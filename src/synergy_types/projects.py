from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from synergy_types.base import CamelModel

ProjectStatus = Literal["active", "completed"]
JoinRequestStatus = Literal["pending", "accepted", "rejected"]


class ProjectAccess(BaseModel):
    """Membership view of a project consumed by the membership guard."""
    project_id: str
    owner_email: str
    member_emails: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    def admits(self, email: str) -> bool:
        return email == self.owner_email or email in self.member_emails


class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=8192)
    category: str = Field(..., min_length=1, max_length=255)
    skills: list[str] = Field(default_factory=list)
    timeline: Optional[str] = Field(None, max_length=255)
    max_members: Optional[int] = Field(None, ge=1, le=100)


class ProjectGet(CamelModel):
    id: str = Field(..., alias="_id")
    title: str
    description: str
    category: str
    skills: list[str] = Field(default_factory=list)
    creator: str
    creator_email: str
    members: list[str] = Field(default_factory=list)
    timeline: Optional[str] = None
    max_members: int
    status: ProjectStatus = "active"
    created_at: datetime


class UserProjects(CamelModel):
    created: list[ProjectGet] = Field(default_factory=list)
    joined: list[ProjectGet] = Field(default_factory=list)


class JoinRequestCreate(CamelModel):
    message: str = Field("", max_length=2048)


class JoinRequestRespond(CamelModel):
    status: Literal["accepted", "rejected"]


class JoinRequestGet(CamelModel):
    id: str = Field(..., alias="_id")
    project_id: str
    project_title: str
    requester_id: str
    requester_name: str
    requester_email: str
    requester_skills: list[str] = Field(default_factory=list)
    requester_college: Optional[str] = None
    message: str = ""
    status: JoinRequestStatus
    owner_id: str
    owner_email: str
    created_at: datetime
    responded_at: Optional[datetime] = None


class JoinRequestResult(CamelModel):
    message: str
    request: JoinRequestGet
