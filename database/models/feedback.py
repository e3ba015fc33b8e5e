import enum
import uuid

from sqlalchemy import (
    Column, Text, Integer, Numeric, TIMESTAMP, ForeignKey, Enum, JSON, Uuid,
    UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class FeedbackStatus(str, enum.Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    DISPUTED = 'disputed'


class Feedback(Base):
    """
    A roaster's feedback on a roast request they were selected for.

    At most one per (roast_request_id, roaster_id); the unique constraint
    is what closes the race between two concurrent submissions.
    """
    __tablename__ = 'feedback'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    roast_request_id = Column(Uuid, ForeignKey('roast_request.id', ondelete='RESTRICT'), nullable=False)
    roaster_id = Column(Uuid, ForeignKey('users.id', ondelete='RESTRICT'), nullable=False)

    status = Column(
        Enum(FeedbackStatus, name='feedback_status', native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=FeedbackStatus.PENDING
    )
    final_price = Column(Numeric(10, 2), nullable=False)

    # Content payload, opaque to the selection engine
    first_impression = Column(Text)
    strengths_found = Column(JSON, default=list)
    weaknesses_found = Column(JSON, default=list)
    actionable_steps = Column(JSON, default=list)
    competitor_comparison = Column(Text)

    creator_rating = Column(Integer)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    roast_request = relationship("RoastRequest", back_populates="feedbacks")
    ratings = relationship("FeedbackRating", back_populates="feedback", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('roast_request_id', 'roaster_id', name='uq_feedback_request_roaster'),
        Index('idx_feedback_roaster', 'roaster_id'),
        Index('idx_feedback_status', 'status'),
    )


class FeedbackRating(Base):
    """Creator's rating of a feedback, optionally per focus area."""
    __tablename__ = 'feedback_rating'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    feedback_id = Column(Uuid, ForeignKey('feedback.id', ondelete='CASCADE'), nullable=False)
    domain = Column(Text)

    clarity = Column(Integer, nullable=False)
    relevance = Column(Integer, nullable=False)
    depth = Column(Integer, nullable=False)
    actionable = Column(Integer, nullable=False)
    overall = Column(Integer, nullable=False)
    comment = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    feedback = relationship("Feedback", back_populates="ratings")

    __table_args__ = (
        Index('idx_feedback_rating_feedback', 'feedback_id'),
    )
