"""
App assembly entry point.

Re-exports the FastAPI `app` from `botpanel.api.main` so `uvicorn app:app`
keeps working from the repository root.
"""

from botpanel.api.main import app  # noqa: F401
