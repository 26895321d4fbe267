"""
API endpoint modules for MockPrep
"""

from src.api.endpoints import analysis, mock, audio, history

__all__ = ["analysis", "mock", "audio", "history"]
