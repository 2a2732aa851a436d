"""Router package exports."""

from . import analysis, health, notifications, progress, review, sessions, vocabulary

__all__ = [
    "analysis",
    "health",
    "notifications",
    "progress",
    "review",
    "sessions",
    "vocabulary",
]
