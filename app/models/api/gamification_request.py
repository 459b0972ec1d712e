"""
Gamification API request models.
"""

from typing import Literal

from pydantic import BaseModel, Field


class BossActionRequest(BaseModel):
    """Body for POST /api/gamification/boss."""

    action: Literal["hit", "new"] = Field(..., description="'hit' the active boss or start a 'new' one")
    contact_name: str | None = Field(default=None, description="Donor the new boss is about")
    contact_id: str | None = Field(default=None, description="CRM contact id for the new boss")
    goal: str | None = Field(default=None, description="Ask the new boss represents")
    hp_max: int | None = Field(default=None, ge=1, description="Hit points for the new boss")
