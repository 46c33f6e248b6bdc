from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from synergy_types.base import CamelModel


class Identity(BaseModel):
    """
    Resolved user identity as seen by the realtime channel.

    E-mail is the membership key for projects.
    """
    id: str
    name: str
    email: str

    model_config = ConfigDict(frozen=True, from_attributes=True)


class UserRegister(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)
    college: Optional[str] = Field(None, max_length=255)
    education: Optional[str] = Field(None, max_length=255)
    skills: list[str] = Field(default_factory=list)
    about: Optional[str] = Field(None, max_length=4096)


class UserLogin(CamelModel):
    email: str
    password: str


class UserGet(CamelModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    college: Optional[str] = None
    education: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    about: Optional[str] = None
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserGet
