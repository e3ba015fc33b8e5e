#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional


class CreateRoastRequest(BaseModel):
    """Request to post a new roast request."""
    title: str = Field(..., min_length=1, description="Short title of the app to roast")
    max_price: Decimal = Field(..., description="Maximum price paid per feedback")
    feedbacks_requested: int = Field(..., description="Number of roasters wanted (1-20)")
    focus_areas: List[str] = Field(default_factory=list, description="Areas the feedback should cover")
    app_url: Optional[str] = None
    description: Optional[str] = None
    target_audience: Optional[str] = None
    category: Optional[str] = None
    deadline: Optional[datetime] = None
    is_urgent: bool = False


class ApplyRequest(BaseModel):
    """Request to apply to a roast request."""
    motivation: Optional[str] = Field(None, description="Optional pitch to the creator")


class SelectionRequest(BaseModel):
    """Request to manually select roasters."""
    application_ids: List[str] = Field(..., description="Applications to accept")


class FeedbackRequest(BaseModel):
    """Request to submit feedback on a roast request."""
    final_price: Decimal = Field(..., ge=0, description="Price charged, at most the request's max_price")
    first_impression: Optional[str] = None
    strengths_found: List[str] = Field(default_factory=list)
    weaknesses_found: List[str] = Field(default_factory=list)
    actionable_steps: List[str] = Field(default_factory=list)
    competitor_comparison: Optional[str] = None


class RatingItem(BaseModel):
    overall: int = Field(..., description="Score for this domain (1-5)")
    domain: Optional[str] = None
    comment: Optional[str] = None


class RateFeedbackRequest(BaseModel):
    """Request to rate a feedback, one entry per rated domain."""
    ratings: List[RatingItem] = Field(..., min_length=1)
