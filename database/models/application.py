import enum
import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, ForeignKey, Enum, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class ApplicationStatus(str, enum.Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    AUTO_SELECTED = 'auto_selected'
    REJECTED = 'rejected'


# Statuses that occupy one of the request's feedback slots
HELD_STATUSES = (ApplicationStatus.ACCEPTED, ApplicationStatus.AUTO_SELECTED)


class RoastApplication(Base):
    """
    A roaster's bid on a roast request.

    score is computed once when the application is recorded and never
    recomputed, so selection is auditable against the profile as it was
    at application time. Only status and selected_at change afterwards.
    """
    __tablename__ = 'roast_application'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    roast_request_id = Column(Uuid, ForeignKey('roast_request.id', ondelete='CASCADE'), nullable=False)
    roaster_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    motivation = Column(Text)
    score = Column(Integer, nullable=False)

    status = Column(
        Enum(ApplicationStatus, name='roast_application_status', native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ApplicationStatus.PENDING
    )

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    selected_at = Column(TIMESTAMP(timezone=True))

    roast_request = relationship("RoastRequest", back_populates="applications")

    __table_args__ = (
        UniqueConstraint('roast_request_id', 'roaster_id', name='uq_roast_application_request_roaster'),
        Index('idx_roast_application_request_status', 'roast_request_id', 'status'),
        Index('idx_roast_application_roaster', 'roaster_id'),
        Index('idx_roast_application_score', 'score'),
    )
