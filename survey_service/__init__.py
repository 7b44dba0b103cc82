"""FastAPI application package for the survey service.

Business logic lives in `survey_service/logic/`, persistence in
`survey_service/db/` and route handlers in `survey_service/routes/`.
"""

from __future__ import annotations

from survey_service.main import create_app

__all__ = ["create_app"]
