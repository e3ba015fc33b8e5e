#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

import uuid
from decimal import Decimal
from typing import Optional, Any
from datetime import datetime

from fastapi import HTTPException


def safe_float(value: Optional[Any], default: float = 0.0) -> float:
    """
    Safely convert value to float.

    Args:
        value: Value to convert (can be Decimal, int, float, or None).
        default: Default value if conversion fails or value is None.

    Returns:
        Float value.
    """
    if value is None:
        return default

    if isinstance(value, Decimal):
        return float(value)

    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Safely convert datetime to ISO format string.
    """
    if dt is None:
        return None
    return dt.isoformat()


def enum_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, 'value', value)


def parse_uuid(value: str, name: str = "id") -> uuid.UUID:
    """Parse a path parameter as a UUID, or fail with 400."""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name} format: {value}. Must be a valid UUID."
        )
