"""Tests for mm_common.id_generator and mm_common.datetime_utils."""

from datetime import UTC, datetime, timedelta, timezone

from src.mm_common.datetime_utils import YearMonth, as_utc, period_of, previous_month, utc_now
from src.mm_common.id_generator import generate_member_id


class TestGenerateMemberId:
    def test_five_digits(self) -> None:
        for _ in range(200):
            member_id = generate_member_id()
            assert len(member_id) == 5
            assert member_id.isdigit()
            assert 10000 <= int(member_id) <= 99999

    def test_never_collides_with_seed_admin(self) -> None:
        assert all(generate_member_id() != "00000" for _ in range(200))


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        assert utc_now().tzinfo is not None

    def test_is_utc(self) -> None:
        assert utc_now().utcoffset() == timedelta(0)


class TestPeriods:
    def test_naive_treated_as_utc(self) -> None:
        assert as_utc(datetime(2024, 5, 1, 12, 0)) == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def test_period_of_converts_offset(self) -> None:
        ist = timezone(timedelta(hours=5, minutes=30))
        assert period_of(datetime(2024, 3, 1, 1, 0, tzinfo=ist)) == YearMonth(2024, 2)

    def test_previous_month(self) -> None:
        assert previous_month(datetime(2024, 6, 14, tzinfo=UTC)) == YearMonth(2024, 5)

    def test_previous_month_wraps_january(self) -> None:
        assert previous_month(datetime(2024, 1, 15, tzinfo=UTC)) == YearMonth(2023, 12)
