"""
Domain subpackage for the dialer feature.
"""

from .models import (
    CallLogResult,
    GamificationState,
    LedgerSnapshot,
    QueueEntry,
    RewardRoll,
    ScoredContact,
)

__all__ = [
    "CallLogResult",
    "GamificationState",
    "LedgerSnapshot",
    "QueueEntry",
    "RewardRoll",
    "ScoredContact",
]
