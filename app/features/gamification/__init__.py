"""
Gamification overlays layered on the dialer ledger: boss battles, daily
missions and season progress.
"""

from .services import boss_service, missions_service, season_service  # noqa: F401
