#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any


class RoastRequestSummary(BaseModel):
    """Roast request as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    request_id: str
    creator_id: str
    title: str
    status: str
    max_price: float
    feedbacks_requested: int
    held_slots: int
    focus_areas: List[str] = []
    is_urgent: bool = False
    deadline: Optional[str] = None
    created_at: Optional[str] = None


class RoastRequestResponse(BaseModel):
    success: bool
    request: RoastRequestSummary


class ApplicationSummary(BaseModel):
    application_id: str
    request_id: str
    roaster_id: str
    status: str
    score: int
    motivation: Optional[str] = None
    created_at: Optional[str] = None
    selected_at: Optional[str] = None


class ApplicationResponse(BaseModel):
    success: bool
    application: ApplicationSummary


class ApplicationsListResponse(BaseModel):
    success: bool
    count: int
    applications: List[ApplicationSummary]


class SelectionResponse(BaseModel):
    """Outcome of a selection round."""
    success: bool
    request_id: str
    mode: str
    selected_count: int
    selected_ids: List[str]
    rejected_ids: List[str]
    held_slots: int
    status: str


class FeedbackSummary(BaseModel):
    feedback_id: str
    request_id: str
    roaster_id: str
    status: str
    final_price: float
    creator_rating: Optional[int] = None
    created_at: Optional[str] = None


class FeedbackResponse(BaseModel):
    success: bool
    feedback: FeedbackSummary


class RatingsResponse(BaseModel):
    success: bool
    feedback_id: str
    creator_rating: Optional[int] = None
    ratings: List[Dict[str, Any]]


class RoasterStatsResponse(BaseModel):
    success: bool
    stats: Dict[str, Any]
