"""API route handlers."""

from .roast_requests import router as roast_requests_router
from .applications import router as applications_router
from .feedback import router as feedback_router
from .roasters import router as roasters_router
