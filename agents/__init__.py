"""
Agents package for Gemini-based AI agents.

Each agent follows a consistent structure with agent.py, tools.py, and prompts.py.
"""

from agents.base import BaseAgent, create_genai_client
from agents.interviewer.agent import EvaluationClient

__all__ = [
    "BaseAgent",
    "create_genai_client",
    "EvaluationClient",
]
