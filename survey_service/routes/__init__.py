"""APIRouter registration for the survey service."""

from __future__ import annotations

from fastapi import APIRouter

from survey_service.routes.responses import router as responses_router
from survey_service.routes.results import router as results_router
from survey_service.routes.surveys import router as surveys_router

api_router = APIRouter()
api_router.include_router(surveys_router, tags=["Surveys"])
api_router.include_router(responses_router, tags=["Responses"])
api_router.include_router(results_router, tags=["Results"])

__all__ = ["api_router"]
