"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from registration_api.api.routes import registrations, newsletter
from registration_api.core.config import get_settings

api_router = APIRouter(prefix=get_settings().API_PREFIX)
api_router.include_router(registrations.router)
api_router.include_router(newsletter.router)
