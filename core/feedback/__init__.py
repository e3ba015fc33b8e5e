from core.feedback.service import FeedbackService, FeedbackSubmission, RatingInput

__all__ = ['FeedbackService', 'FeedbackSubmission', 'RatingInput']
