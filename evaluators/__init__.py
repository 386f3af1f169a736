"""Evaluators package for the AI Search Readiness Checker."""

from .orchestrator import CheckOrchestrator, CheckRun
from .scoring import compute_overall_score, generate_check_response

__all__ = [
    "CheckOrchestrator",
    "CheckRun",
    "compute_overall_score",
    "generate_check_response",
]
