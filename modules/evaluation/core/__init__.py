"""
Evaluation Module Core Package.

Contains configuration and core utilities.
"""

from modules.evaluation.core.config import EvaluationSettings, get_evaluation_settings

__all__ = ["EvaluationSettings", "get_evaluation_settings"]
