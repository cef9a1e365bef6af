"""
Evaluation Module Routers.
"""

from modules.evaluation.routers.approval import router as approval_router
from modules.evaluation.routers.work_rate import router as work_rate_router

__all__ = ["approval_router", "work_rate_router"]
