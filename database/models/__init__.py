from .base import Base, utcnow
from .user import User, UserRole, RoasterProfile, CreatorProfile, Experience, RoasterLevel
from .roast_request import RoastRequest, RequestStatus
from .application import RoastApplication, ApplicationStatus, HELD_STATUSES
from .feedback import Feedback, FeedbackStatus, FeedbackRating

__all__ = [
    'Base',
    'utcnow',
    'User',
    'UserRole',
    'RoasterProfile',
    'CreatorProfile',
    'Experience',
    'RoasterLevel',
    'RoastRequest',
    'RequestStatus',
    'RoastApplication',
    'ApplicationStatus',
    'HELD_STATUSES',
    'Feedback',
    'FeedbackStatus',
    'FeedbackRating',
]
