import enum
import uuid

from sqlalchemy import (
    Column, Text, Integer, Boolean, Numeric, TIMESTAMP, ForeignKey, Enum, JSON, Uuid,
    CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class RequestStatus(str, enum.Enum):
    OPEN = 'open'
    COLLECTING_APPLICATIONS = 'collecting_applications'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class RoastRequest(Base):
    """
    A creator's request for paid feedback on their app.

    held_slots is the capacity counter: the number of applications
    currently accepted or auto-selected. It only moves through the
    conditional update in RoastRequestRepository.reserve_slots, which
    keeps it at or below feedbacks_requested.
    """
    __tablename__ = 'roast_request'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    title = Column(Text, nullable=False)
    app_url = Column(Text)
    description = Column(Text)
    target_audience = Column(Text)
    category = Column(Text)
    focus_areas = Column(JSON, nullable=False, default=list)

    # Informational only; nothing is charged
    max_price = Column(Numeric(10, 2), nullable=False)
    feedbacks_requested = Column(Integer, nullable=False, default=1)
    held_slots = Column(Integer, nullable=False, default=0)

    deadline = Column(TIMESTAMP(timezone=True))
    is_urgent = Column(Boolean, nullable=False, default=False)

    status = Column(
        Enum(RequestStatus, name='roast_request_status', native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RequestStatus.OPEN
    )

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    applications = relationship("RoastApplication", back_populates="roast_request", cascade="all, delete-orphan")
    feedbacks = relationship("Feedback", back_populates="roast_request")

    __table_args__ = (
        CheckConstraint('feedbacks_requested >= 1', name='ck_roast_request_feedbacks_requested'),
        CheckConstraint('held_slots >= 0 AND held_slots <= feedbacks_requested', name='ck_roast_request_held_slots'),
        Index('idx_roast_request_creator', 'creator_id'),
        Index('idx_roast_request_status', 'status'),
        Index('idx_roast_request_created', 'created_at'),
    )
