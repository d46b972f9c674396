"""Excel interviewer agent."""

from agents.interviewer.agent import EvaluationClient
from agents.interviewer.tools import EXCEL_CATEGORIES, DIFFICULTIES, NEUTRAL_SCORE

__all__ = ["EvaluationClient", "EXCEL_CATEGORIES", "DIFFICULTIES", "NEUTRAL_SCORE"]
