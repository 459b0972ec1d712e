# app/models/domain/donor_domain.py
"""
Donor Domain Models
Read-only shapes for what the two CRMs tell us about a donor.
Built by the CRM clients, consumed by queue scoring.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

TRIBUTE_IN_HONOR = "IN_HONOR_OF"
TRIBUTE_IN_MEMORY = "IN_MEMORY_OF"


def parse_crm_date(value: Any) -> date | None:
    """Parse a CRM date ("2025-03-04" or an ISO timestamp) into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


@dataclass(slots=True)
class Contact:
    """A tagged donor contact from OnePage CRM."""

    id: str
    first_name: str = ""
    last_name: str = ""
    phones: list[dict[str, str]] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    last_contacted: date | None = None
    created_at: date | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Contact":
        return cls(
            id=str(data.get("id", "")),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            phones=list(data.get("phones") or []),
            tags=list(data.get("tags") or []),
            last_contacted=parse_crm_date(data.get("last_contacted")),
            created_at=parse_crm_date(data.get("created_at")),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def primary_phone(self) -> str | None:
        """First phone number with a non-blank value, or None."""
        for phone in self.phones:
            value = (phone or {}).get("value")
            if value and str(value).strip():
                return str(value).strip()
        return None


@dataclass(slots=True)
class DonationInfo:
    """Giving history for one donor, summarised from Neon CRM donations."""

    last_gift_amount: float | None = None
    last_gift_date: date | None = None
    lifetime_giving: float = 0.0
    last_campaign: str | None = None
    last_fund: str | None = None
    tribute_type: str | None = None  # IN_HONOR_OF | IN_MEMORY_OF
    tribute_name: str | None = None
    last_donation_note: str | None = None
    donation_count: int = 0
    neon_account_id: str | None = None

    @classmethod
    def empty(cls, neon_account_id: str | None = None) -> "DonationInfo":
        return cls(neon_account_id=neon_account_id)

    @property
    def has_tribute(self) -> bool:
        return bool(self.tribute_type or self.tribute_name)

    def to_cache(self) -> dict[str, Any]:
        data = asdict(self)
        data["last_gift_date"] = self.last_gift_date.isoformat() if self.last_gift_date else None
        return data

    @classmethod
    def from_cache(cls, data: dict[str, Any]) -> "DonationInfo":
        values = dict(data)
        values["last_gift_date"] = parse_crm_date(values.get("last_gift_date"))
        return cls(**values)


@dataclass(slots=True)
class CallNote:
    """A note or logged call attached to a OnePage contact."""

    id: str
    text: str
    created_at: date | None = None
    kind: str = "note"  # "note" or "call"
