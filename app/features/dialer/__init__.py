"""
Dialer feature package.

Keeps every layer of the calling flow together: domain models, the daily
queue (scoring and storage), reward rolls, the session/gamification ledger,
call logging and the HTTP router (api.router).
"""

# Re-export the primary building blocks for easy access.
from .calls.service import CallLogService, call_log_service  # noqa: F401
from .ledger.service import LedgerService, ledger_service  # noqa: F401
from .queue.service import QueueScoringService, queue_scoring_service  # noqa: F401
