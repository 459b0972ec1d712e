"""
Dialer API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, ConfigDict, Field


class LogCallRequest(BaseModel):
    """Body for POST /api/dialer/log."""

    model_config = ConfigDict(populate_by_name=True)

    queue_id: int = Field(..., alias="queueId", description="Queue entry that was called")
    outcome: str = Field(..., min_length=1, description="Call outcome, e.g. pledged or no_answer")
    pledge_amount: float | None = Field(
        default=None, alias="pledgeAmount", ge=0, description="Pledged amount for pledged calls"
    )


class SkipRequest(BaseModel):
    """Body for POST /api/dialer/skip."""

    model_config = ConfigDict(populate_by_name=True)

    queue_id: int = Field(..., alias="queueId", description="Queue entry to move to the end")
