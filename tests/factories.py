"""
Shared builders and in-memory fakes for the test suite.
"""

from datetime import date

from app.features.dialer.domain import QueueEntry
from app.models.domain.donor_domain import Contact, DonationInfo

# A Monday, so weekly-reset rules can be exercised around it
TODAY = date(2026, 3, 2)


def make_contact(contact_id: str, first: str = "Dana", last: str = "Levi", **overrides) -> Contact:
    values = {
        "id": contact_id,
        "first_name": first,
        "last_name": last,
        "phones": [{"type": "mobile", "value": "555-0100"}],
        "tags": ["FCI Donor"],
    }
    values.update(overrides)
    return Contact(**values)


def make_entry(entry_id: int = 1, **overrides) -> QueueEntry:
    values = {
        "id": entry_id,
        "date": TODAY,
        "contact_id": f"c{entry_id}",
        "contact_name": "Dana Levi",
        "phone": "555-0100",
        "position": entry_id,
    }
    values.update(overrides)
    return QueueEntry(**values)


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}

    async def set_with_ttl(self, key: str, value: str, ttl_s: int | None = None) -> bool:
        self.store[key] = value
        return True

    async def get(self, key: str) -> str | None:
        return self.store.get(key)


class FakeTransaction:
    """Stands in for `await get_db_transaction()`; records commit/rollback."""

    def __init__(self):
        self.conn = object()
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        return False


class InMemoryQueueRepository:
    """Queue store with the same (date, contact_id) upsert rules as the SQL."""

    def __init__(self):
        self.rows: dict[tuple[date, str], QueueEntry] = {}
        self._next_id = 1
        self.upsert_calls = 0

    async def fetch_queue(self, day: date) -> list[QueueEntry]:
        entries = [entry for (d, _), entry in self.rows.items() if d == day]
        return sorted(entries, key=lambda e: (e.position, e.id))

    async def upsert_entries(self, day, scored) -> None:
        self.upsert_calls += 1
        base = max((e.position for (d, _), e in self.rows.items() if d == day), default=0)
        for rank, item in enumerate(scored, start=1):
            key = (day, item.contact.id)
            existing = self.rows.get(key)
            if existing:
                existing.context_line = item.context_line
                existing.suggested_ask = item.suggested_ask
                existing.score = item.score
                continue
            self.rows[key] = QueueEntry(
                id=self._next_id,
                date=day,
                contact_id=item.contact.id,
                contact_name=item.contact.full_name,
                phone=item.phone,
                position=base + rank,
                suggested_ask=item.suggested_ask,
                context_line=item.context_line,
                score=item.score,
            )
            self._next_id += 1

    async def move_to_end(self, queue_id: int) -> QueueEntry | None:
        for (day, _), entry in self.rows.items():
            if entry.id == queue_id:
                last = max(e.position for (d, _), e in self.rows.items() if d == day)
                entry.position = last + 1
                entry.skip_count += 1
                return entry
        return None


class FakeGateway:
    def __init__(self, contacts=None, donations=None, failing_names=(), notes=None):
        self.contacts = list(contacts or [])
        self.donations = dict(donations or {})
        self.failing_names = set(failing_names)
        self.notes = dict(notes or {})
        self.logged: list[tuple] = []

    async def fetch_contacts(self):
        return list(self.contacts)

    async def fetch_donation_history(self, name):
        if name in self.failing_names:
            raise RuntimeError(f"lookup failed for {name}")
        return self.donations.get(name, DonationInfo.empty())

    async def fetch_recent_notes(self, contact_id):
        return self.notes.get(contact_id, [])

    async def log_outcome(self, contact_id, text, result_code, call_date=None):
        self.logged.append((contact_id, text, result_code, call_date))
        return True
