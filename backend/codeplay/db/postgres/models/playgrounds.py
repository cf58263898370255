import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base import Base


class PlaygroundTemplateKind(str, enum.Enum):
    REACT = "REACT"
    NEXTJS = "NEXTJS"
    EXPRESS = "EXPRESS"
    VUE = "VUE"
    HONO = "HONO"
    ANGULAR = "ANGULAR"


class Playground(Base):
    __tablename__ = "playgrounds"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    template = Column(SQLEnum(PlaygroundTemplateKind, name="playground_template"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User")
    # One blob per playground; loaded eagerly so async handlers never lazy-load.
    template_files = relationship(
        "TemplateFile",
        back_populates="playground",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TemplateFile(Base):
    __tablename__ = "template_files"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    playground_id = Column(
        UUID(as_uuid=True),
        ForeignKey("playgrounds.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    content = Column(JSONB, default=dict, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    playground = relationship("Playground", back_populates="template_files")


class StarMark(Base):
    __tablename__ = "star_marks"
    __table_args__ = (
        UniqueConstraint("user_id", "playground_id", name="uq_star_marks_user_playground"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    playground_id = Column(
        UUID(as_uuid=True),
        ForeignKey("playgrounds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
