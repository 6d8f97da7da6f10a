"""Learning path service entry points."""

from .service import LearningPathService, build_default_service

__all__ = [
    "LearningPathService",
    "build_default_service",
]
