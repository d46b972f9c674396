"""Database models. Importing this package registers every table on Base.metadata."""

from database.models.users import User, UserRole, UserSession
from database.models.interviews import HRRecommendation, Interview, InterviewStatus
from database.models.questions import QuestionBankEntry
from database.models.evaluations import CalibrationBaseline, EvaluationHistory

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "Interview",
    "InterviewStatus",
    "HRRecommendation",
    "QuestionBankEntry",
    "EvaluationHistory",
    "CalibrationBaseline",
]
