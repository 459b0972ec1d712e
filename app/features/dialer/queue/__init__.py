"""
Daily call queue package.

Scores donor contacts into the day's ordered call list and persists it.
"""

from .repository import QueueRepository
from .service import QueueScoringService, queue_scoring_service

__all__ = ["QueueRepository", "QueueScoringService", "queue_scoring_service"]
