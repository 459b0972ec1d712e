"""
Session and gamification ledger.
"""

from .repository import LedgerRepository
from .service import LedgerService, advance_state, apply_bonus_xp, ledger_service, level_for_xp

__all__ = [
    "LedgerRepository",
    "LedgerService",
    "advance_state",
    "apply_bonus_xp",
    "ledger_service",
    "level_for_xp",
]
