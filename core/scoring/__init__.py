#!/usr/bin/env python3
"""
Scoring Module - roaster fit score against a roast request.

Public API:
- calculate_roaster_score: integer score frozen onto an application
- score_breakdown: per-factor points, for display and debugging
"""

from core.scoring.roaster_score import calculate_roaster_score, score_breakdown, ScoreBreakdown, round_half_up

__all__ = ['calculate_roaster_score', 'score_breakdown', 'ScoreBreakdown', 'round_half_up']
