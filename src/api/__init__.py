"""
API layer for MockPrep

Contains FastAPI routers for:
- Resume analysis and the question bank
- Mock interview sessions
- Speech synthesis
- Session history
"""

from src.api.router import api_router

__all__ = ["api_router"]
