"""
Focus Guardian backend package.

The FastAPI application lives in ``focus_api.main`` (``app`` and the
``create_app`` factory); ``python -m focus_api`` serves it with uvicorn.
"""

__version__ = "0.1.0"
