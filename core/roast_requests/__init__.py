from core.roast_requests.service import RoastRequestService, RoastRequestDraft

__all__ = ['RoastRequestService', 'RoastRequestDraft']
