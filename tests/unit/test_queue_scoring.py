from datetime import timedelta

from app.features.dialer.queue.service import (
    NEVER_DAYS,
    NO_HISTORY,
    build_context_line,
    calculate_suggested_ask,
    days_since,
    months_ago,
    round_to_ten,
    score_contact,
    truncate,
)
from app.models.domain.donor_domain import TRIBUTE_IN_MEMORY, DonationInfo
from tests.factories import TODAY, make_contact


def test_days_since_missing_date_is_never():
    assert days_since(None, TODAY) == NEVER_DAYS


def test_days_since_future_date_clamps_to_zero():
    assert days_since(TODAY + timedelta(days=3), TODAY) == 0


def test_months_ago_labels():
    assert months_ago(TODAY - timedelta(days=10), TODAY) == "this month"
    assert months_ago(TODAY - timedelta(days=35), TODAY) == "1 month ago"
    assert months_ago(TODAY - timedelta(days=95), TODAY) == "3 months ago"


def test_round_to_ten_rounds_halves_up():
    assert round_to_ten(125) == 130
    assert round_to_ten(124.9) == 120
    assert round_to_ten(0) == 0


def test_suggested_ask_from_last_gift():
    assert calculate_suggested_ask(100, 300) == 110


def test_suggested_ask_from_lifetime_when_no_last_gift():
    assert calculate_suggested_ask(None, 250) == 130


def test_suggested_ask_default_without_giving():
    assert calculate_suggested_ask(None, 0) == 180
    assert calculate_suggested_ask(0, 0) == 180


def test_score_lapsed_warm_donor():
    contact = make_contact("c1", last_contacted=TODAY - timedelta(days=100))
    donation = DonationInfo(
        last_gift_amount=100,
        last_gift_date=TODAY - timedelta(days=200),
        lifetime_giving=300,
    )

    # 100 lapsed + 50 stale + 20 gift recency + 3 giving size + 10 staleness
    assert score_contact(contact, donation, TODAY) == 183


def test_score_never_contacted_never_gave():
    contact = make_contact("c1")

    # 50 stale + 30 capped gift recency + 20 capped staleness
    assert score_contact(contact, DonationInfo.empty(), TODAY) == 100


def test_new_contact_bonus_is_configurable():
    contact = make_contact(
        "c1",
        created_at=TODAY - timedelta(days=10),
        last_contacted=TODAY - timedelta(days=5),
    )
    donation = DonationInfo.empty()

    with_bonus = score_contact(contact, donation, TODAY)
    without_bonus = score_contact(contact, donation, TODAY, new_contact_bonus=False)

    assert with_bonus == 60.5
    assert with_bonus - without_bonus == 30


def test_tribute_bonus_is_configurable():
    contact = make_contact("c1", last_contacted=TODAY - timedelta(days=5))
    plain = DonationInfo.empty()
    tribute = DonationInfo(tribute_type=TRIBUTE_IN_MEMORY, tribute_name="Ruth")

    assert score_contact(contact, tribute, TODAY) - score_contact(contact, plain, TODAY) == 40
    assert score_contact(contact, tribute, TODAY, tribute_bonus=False) == score_contact(
        contact, plain, TODAY
    )


def test_capped_terms_never_exceed_caps():
    contact = make_contact("c1", last_contacted=TODAY - timedelta(days=80))
    donation = DonationInfo(
        last_gift_amount=5000,
        last_gift_date=TODAY - timedelta(days=10),
        lifetime_giving=1_000_000,
    )

    # 100 lapsed + 1 gift recency + 20 capped giving size + 8 staleness
    assert score_contact(contact, donation, TODAY) == 129


def test_context_line_full():
    donation = DonationInfo(
        last_gift_amount=100,
        last_gift_date=TODAY - timedelta(days=65),
        lifetime_giving=300,
        last_campaign="Spring Gala",
        donation_count=3,
        tribute_type=TRIBUTE_IN_MEMORY,
        tribute_name="Ruth Cohen",
    )

    line = build_context_line(
        donation, TODAY - timedelta(days=100), "Wants a call after Pesach", TODAY
    )

    assert line == (
        "Gave $100 2 months ago (Spring Gala) · In memory of Ruth Cohen · "
        "$300 lifetime (3 gifts) · Last contacted 100 days ago · "
        'Last note: "Wants a call after Pesach"'
    )


def test_context_line_without_history():
    assert build_context_line(DonationInfo.empty(), None, None, TODAY) == NO_HISTORY


def test_context_line_skips_contact_made_today():
    line = build_context_line(DonationInfo(lifetime_giving=50), TODAY, None, TODAY)

    assert line == "$50 lifetime"


def test_long_call_note_is_truncated_with_ellipsis():
    note = "word " * 40
    truncated = truncate(note)

    assert len(truncated) <= 80
    assert truncated.endswith("…")
    assert truncate("short note") == "short note"
