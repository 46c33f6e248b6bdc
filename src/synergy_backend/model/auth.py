from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from synergy_types.base import utc_now

from .base import Base, new_id


class User(Base):
    __tablename__ = 'user'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    password = Column(String(255), nullable=False)

    # Profile
    college = Column(String(255))
    education = Column(String(255))
    skills = Column(JSON, nullable=False, default=list)
    about = Column(Text)

    # Relationships
    projects = relationship("Project", back_populates="owner", uselist=True, lazy="select")
