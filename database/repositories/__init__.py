from database.repositories.base import BaseRepository
from database.repositories.roast_request import RoastRequestRepository
from database.repositories.application import ApplicationRepository
from database.repositories.feedback import FeedbackRepository
from database.repositories.profile import ProfileRepository

__all__ = [
    'BaseRepository',
    'RoastRequestRepository',
    'ApplicationRepository',
    'FeedbackRepository',
    'ProfileRepository',
]
