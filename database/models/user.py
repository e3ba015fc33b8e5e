import enum
import uuid

from sqlalchemy import Column, Text, Integer, Float, Numeric, TIMESTAMP, ForeignKey, Enum, JSON, Uuid, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class UserRole(str, enum.Enum):
    CREATOR = 'creator'
    ROASTER = 'roaster'


class Experience(str, enum.Enum):
    BEGINNER = 'Beginner'
    INTERMEDIATE = 'Intermediate'
    EXPERT = 'Expert'


class RoasterLevel(str, enum.Enum):
    ROOKIE = 'rookie'
    VERIFIED = 'verified'
    EXPERT = 'expert'
    MASTER = 'master'


class User(Base):
    """
    Marketplace account. A user may hold a creator profile, a roaster
    profile, or both; primary_role says which side they currently act on.
    """
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text)
    primary_role = Column(
        Enum(UserRole, name='user_role', native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.CREATOR
    )
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    roaster_profile = relationship("RoasterProfile", back_populates="user", uselist=False)
    creator_profile = relationship("CreatorProfile", back_populates="user", uselist=False)


class RoasterProfile(Base):
    """
    Roaster side of a user. Read by the scorer when the roaster applies;
    counters are bumped when feedback is admitted.
    """
    __tablename__ = 'roaster_profile'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)

    specialties = Column(JSON, nullable=False, default=list)
    experience = Column(Text, nullable=False, default=Experience.BEGINNER.value)
    rating = Column(Float, nullable=False, default=0.0)
    level = Column(Text, nullable=False, default=RoasterLevel.ROOKIE.value)
    completion_rate = Column(Float, nullable=False, default=100.0)

    completed_roasts = Column(Integer, nullable=False, default=0)
    total_earned = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="roaster_profile")

    __table_args__ = (
        Index('idx_roaster_profile_user', 'user_id'),
    )


class CreatorProfile(Base):
    __tablename__ = 'creator_profile'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    company = Column(Text)
    projects_posted = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="creator_profile")
