import json
from datetime import date

import httpx
import pytest

from app.core.errors import UpstreamUnavailableError
from app.services.crm import base_client
from app.services.crm.neon_client import NeonClient, summarize_donations
from app.services.crm.onepage_client import CONTACTS_PER_PAGE, OnePageClient


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(base_client, "BACKOFF_FACTOR", 0)


def _contact(i: int, phones=None) -> dict:
    return {
        "contact": {
            "id": f"c{i}",
            "first_name": "Donor",
            "last_name": str(i),
            "phones": phones if phones is not None else [{"type": "work", "value": "555-0100"}],
            "last_contacted": "2025-12-01",
            "created_at": "2024-05-01T10:00:00Z",
        }
    }


def test_summarize_donations_uses_newest_gift_for_details():
    donations = [
        {
            "amount": "100",
            "date": "2025-06-01",
            "campaign": {"name": "Spring Gala"},
            "tribute": {"tributeType": "IN_MEMORY_OF", "tributeName": "Ruth"},
            "note": "old note",
        },
        {
            "amount": 250,
            "date": "2025-11-20",
            "campaign": {"name": "Chanukah Drive"},
            "fund": {"name": "General"},
        },
        {"amount": "50"},
    ]

    info = summarize_donations(donations, "42")

    assert info.lifetime_giving == 400
    assert info.donation_count == 3
    assert info.last_gift_amount == 250
    assert info.last_gift_date == date(2025, 11, 20)
    assert info.last_campaign == "Chanukah Drive"
    assert info.last_fund == "General"
    assert info.tribute_type is None
    assert info.last_donation_note is None
    assert info.neon_account_id == "42"


def test_summarize_no_donations_is_empty():
    info = summarize_donations([], None)

    assert info.lifetime_giving == 0
    assert info.last_gift_amount is None
    assert info.has_tribute is False


@pytest.mark.asyncio
async def test_onepage_contacts_follow_pagination():
    requested_pages = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        requested_pages.append(page)
        assert request.url.params["tag_names[]"] == "FCI Donor"
        if page == 1:
            items = [_contact(i) for i in range(CONTACTS_PER_PAGE)]
        else:
            items = [_contact(999, phones=[])]
        return httpx.Response(200, json={"data": {"contacts": items}})

    client = OnePageClient(transport=httpx.MockTransport(handler))
    contacts = await client.fetch_donor_contacts(tag="FCI Donor")
    await client.close()

    assert requested_pages == [1, 2]
    assert len(contacts) == CONTACTS_PER_PAGE + 1
    assert contacts[0].last_contacted == date(2025, 12, 1)
    assert contacts[0].created_at == date(2024, 5, 1)
    assert contacts[-1].primary_phone is None


@pytest.mark.asyncio
async def test_onepage_failed_page_keeps_earlier_contacts():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["page"] == "1":
            items = [_contact(i) for i in range(CONTACTS_PER_PAGE)]
            return httpx.Response(200, json={"data": {"contacts": items}})
        return httpx.Response(503, text="maintenance")

    client = OnePageClient(transport=httpx.MockTransport(handler))
    contacts = await client.fetch_donor_contacts(tag="FCI Donor")
    await client.close()

    assert len(contacts) == CONTACTS_PER_PAGE


@pytest.mark.asyncio
async def test_onepage_recent_notes_merge_newest_first():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/notes"):
            return httpx.Response(
                200,
                json={"data": {"notes": [{"note": {"id": "n1", "text": "Sent thank you", "date": "2025-10-01"}}]}},
            )
        return httpx.Response(
            200,
            json={"data": {"calls": [{"call": {"id": "k1", "text": "Call back in spring", "date": "2025-12-15"}}]}},
        )

    client = OnePageClient(transport=httpx.MockTransport(handler))
    notes = await client.fetch_recent_notes("c1")
    await client.close()

    assert [note.text for note in notes] == ["Call back in spring", "Sent thank you"]
    assert notes[0].kind == "call"


@pytest.mark.asyncio
async def test_onepage_log_call_posts_outcome():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"status": 0})

    client = OnePageClient(transport=httpx.MockTransport(handler))
    ok = await client.log_call("c1", "Call outcome: no_answer.", "no_answer", date(2026, 3, 2))
    await client.close()

    assert ok is True
    assert captured["method"] == "POST"
    assert captured["body"] == {
        "contact_id": "c1",
        "text": "Call outcome: no_answer.",
        "call_result": "no_answer",
        "date": "2026-03-02",
    }


@pytest.mark.asyncio
async def test_neon_donation_history_for_known_donor():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/accounts/search"):
            return httpx.Response(200, json={"searchResults": [{"Account ID": 42}]})
        assert request.url.path.endswith("/accounts/42/donations")
        return httpx.Response(
            200, json={"donations": [{"amount": 120, "date": "2025-09-09"}]}
        )

    client = NeonClient(transport=httpx.MockTransport(handler))
    info = await client.get_donation_history("Dana Levi")
    await client.close()

    assert info.neon_account_id == "42"
    assert info.last_gift_amount == 120
    assert info.lifetime_giving == 120


@pytest.mark.asyncio
async def test_neon_unknown_donor_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"searchResults": []})

    client = NeonClient(transport=httpx.MockTransport(handler))
    info = await client.get_donation_history("Nobody Here")
    await client.close()

    assert info.lifetime_giving == 0
    assert info.neon_account_id is None


@pytest.mark.asyncio
async def test_neon_season_total_falls_back_to_search():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(500)
        return httpx.Response(
            200,
            json={"searchResults": [{"Donation Amount": "100.50"}, {"Donation Amount": "49.50"}]},
        )

    client = NeonClient(transport=httpx.MockTransport(handler))
    total = await client.sum_donations_between(date(2026, 1, 1), date(2026, 4, 30))
    await client.close()

    assert total == 150.0


@pytest.mark.asyncio
async def test_neon_season_total_filters_window():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "donations": [
                    {"donationDate": "2025-12-31", "donationAmount": "500"},
                    {"donationDate": "2026-01-01", "donationAmount": "100"},
                    {"donationDate": "2026-04-30", "donationAmount": "25"},
                    {"donationDate": "2026-05-01", "donationAmount": "900"},
                ]
            },
        )

    client = NeonClient(transport=httpx.MockTransport(handler))
    total = await client.sum_donations_between(date(2026, 1, 1), date(2026, 4, 30))
    await client.close()

    assert total == 125.0


@pytest.mark.asyncio
async def test_transport_error_raises_upstream_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = NeonClient(transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await client.find_account_id("Dana Levi")
    await client.close()

    assert exc_info.value.service == "neon"


def test_summarize_donations_accepts_plain_string_fields():
    donations = [
        {
            "amount": "50",
            "date": "2026-01-01",
            "campaign": "Spring Gala",
            "fund": "Scholarships",
            "tribute": "Ruth Levi",
        }
    ]

    info = summarize_donations(donations, "1")

    assert info.last_campaign == "Spring Gala"
    assert info.last_fund == "Scholarships"
    assert info.tribute_name == "Ruth Levi"
    assert info.has_tribute is True
    assert info.lifetime_giving == 50


def test_summarize_donations_falls_back_to_flat_names():
    donations = [
        {
            "amount": 75,
            "date": "2026-02-01",
            "campaign": None,
            "campaignName": "Purim Appeal",
            "fundName": "General",
            "tributeType": "IN_HONOR_OF",
            "tributeName": "Moshe",
        }
    ]

    info = summarize_donations(donations, "1")

    assert info.last_campaign == "Purim Appeal"
    assert info.last_fund == "General"
    assert info.tribute_type == "IN_HONOR_OF"
    assert info.tribute_name == "Moshe"
