"""
MockPrep - AI mock interview rehearsal for postgraduate re-examinations

Selects practice questions, captures spoken or typed answers, and collects
AI transcription and feedback into reviewable session records.
"""

__version__ = "0.1.0"
__author__ = "MockPrep Team"
