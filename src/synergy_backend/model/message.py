from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from synergy_types.base import utc_now

from .base import Base, new_id


class Message(Base):
    """
    Append-only project chat message.

    ``seq`` records insertion order and breaks timestamp ties, ``id`` is the
    public identifier sent to clients. Author name is denormalized at write
    time and never re-resolved.
    """
    __tablename__ = 'chat_message'
    __table_args__ = (
        Index('chat_message_project_created_idx', 'project_id', 'created_at', 'seq'),
    )

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)

    project_id = Column(ForeignKey('project.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    user_id = Column(ForeignKey('user.id', ondelete='SET NULL', onupdate='RESTRICT'))
    username = Column(String(255), nullable=False)
    content = Column(String(16384), nullable=False)
