"""
Core services for the application.

This package contains the risk scoring, reading simulation, assessment,
account and caregiver alert services.
"""

from .accounts import AccountService
from .assessment import AssessmentService, Submission
from .caregiver import CaregiverNotifier, compose_alert
from .heartpi import HeartPiService
from .simulator import ReadingSimulator
from .tips import Tip, tips_for

__all__ = [
    "AccountService",
    "AssessmentService",
    "Submission",
    "CaregiverNotifier",
    "compose_alert",
    "HeartPiService",
    "ReadingSimulator",
    "Tip",
    "tips_for",
]
