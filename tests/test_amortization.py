"""Tests for the amortization calculator."""

from datetime import date
from decimal import Decimal

import pytest

from emi_ledger.core.amortization import compute_schedule, monthly_payment, validate_terms
from emi_ledger.exceptions import InvalidArgumentError
from emi_ledger.models import DueDatePolicy


class TestMonthlyPayment:
    """Tests for the fixed EMI formula."""

    def test_standard_loan(self) -> None:
        """120000 at 12% over 12 months."""
        assert monthly_payment(Decimal("120000"), Decimal("12"), 12) == Decimal("10661.85")

    def test_zero_rate_divides_evenly(self) -> None:
        assert monthly_payment(Decimal("1200"), 0, 12) == Decimal("100.00")

    def test_zero_rate_rounds_half_up(self) -> None:
        assert monthly_payment(Decimal("1000"), 0, 3) == Decimal("333.33")

    def test_single_month(self) -> None:
        # One period: principal plus one month of interest
        assert monthly_payment(Decimal("10000"), Decimal("12"), 1) == Decimal("10100.00")

    def test_accepts_strings(self) -> None:
        assert monthly_payment("120000", "12", 12) == Decimal("10661.85")

    def test_negligible_rate_behaves_as_zero(self) -> None:
        """A rate too small to move (1+r)^n falls back to P/n."""
        assert monthly_payment("1000", "1E-25", 12) == Decimal("83.33")

        schedule = compute_schedule("1000", "1E-25", 12)
        assert sum(e.principal_component for e in schedule.entries) == Decimal("1000.00")
        assert schedule.entries[-1].balance_after == Decimal("0.00")


class TestComputeSchedule:
    """Tests for compute_schedule."""

    def test_first_period_split(self) -> None:
        schedule = compute_schedule(Decimal("120000"), Decimal("12"), 12)
        first = schedule.entries[0]

        assert schedule.monthly_payment == Decimal("10661.85")
        assert first.interest_component == Decimal("1200.00")
        assert first.principal_component == Decimal("9461.85")
        assert first.balance_after == Decimal("110538.15")

    def test_principal_sums_exactly(self) -> None:
        schedule = compute_schedule(Decimal("120000"), Decimal("12"), 12)

        assert len(schedule.entries) == 12
        assert sum(e.principal_component for e in schedule.entries) == Decimal("120000.00")
        assert schedule.entries[-1].balance_after == Decimal("0.00")

    def test_final_period_absorbs_rounding(self) -> None:
        schedule = compute_schedule(Decimal("120000"), Decimal("12"), 12)
        last = schedule.entries[-1]

        assert abs(last.payment - schedule.monthly_payment) <= Decimal("0.10")
        assert last.payment == last.principal_component + last.interest_component

    def test_zero_rate_schedule(self) -> None:
        schedule = compute_schedule(Decimal("1000"), 0, 3)

        assert [e.payment for e in schedule.entries] == [
            Decimal("333.33"),
            Decimal("333.33"),
            Decimal("333.34"),
        ]
        assert all(e.interest_component == 0 for e in schedule.entries)
        assert schedule.total_interest == Decimal("0.00")
        assert schedule.total_payment == Decimal("1000.00")

    def test_stops_when_balance_cleared_early(self) -> None:
        """Rounding the payment up can clear the balance before the last period."""
        schedule = compute_schedule(Decimal("0.05"), 0, 6)

        assert schedule.monthly_payment == Decimal("0.01")
        assert len(schedule.entries) == 5
        assert sum(e.principal_component for e in schedule.entries) == Decimal("0.05")
        assert schedule.entries[-1].balance_after == 0

    @pytest.mark.parametrize(
        "principal,rate,term",
        [
            ("1000", "0", 1),
            ("99999.99", "10.5", 6),
            ("120000", "12", 12),
            ("150000", "14", 36),
            ("500000", "16", 60),
            ("250000", "9.75", 360),
        ],
    )
    def test_schedule_invariants(self, principal: str, rate: str, term: int) -> None:
        schedule = compute_schedule(principal, rate, term)
        entries = schedule.entries

        assert sum(e.principal_component for e in entries) == Decimal(principal)
        assert entries[-1].balance_after == 0
        assert all(e.payment == e.principal_component + e.interest_component for e in entries)
        balances = [e.balance_after for e in entries]
        assert balances == sorted(balances, reverse=True)
        assert [e.installment_number for e in entries] == list(range(1, len(entries) + 1))
        if Decimal(rate) > 0:
            assert schedule.monthly_payment * term >= Decimal(principal)

    def test_interest_on_opening_balance(self) -> None:
        schedule = compute_schedule(Decimal("50000"), Decimal("14"), 24)

        assert schedule.entries[0].interest_component == Decimal("583.33")

    def test_no_due_dates_without_start(self) -> None:
        schedule = compute_schedule(Decimal("1000"), Decimal("12"), 3)

        assert all(e.due_date is None for e in schedule.entries)

    def test_calendar_month_due_dates_clamp(self) -> None:
        schedule = compute_schedule(Decimal("3000"), Decimal("12"), 3, start_date=date(2024, 1, 31))

        assert [e.due_date for e in schedule.entries] == [
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]

    def test_fixed_30_day_due_dates(self) -> None:
        schedule = compute_schedule(
            Decimal("3000"),
            Decimal("12"),
            2,
            start_date=date(2024, 1, 31),
            due_date_policy=DueDatePolicy.FIXED_30_DAY,
        )

        assert [e.due_date for e in schedule.entries] == [date(2024, 3, 1), date(2024, 3, 31)]

    def test_deterministic(self) -> None:
        first = compute_schedule(Decimal("75000"), Decimal("16"), 18, start_date=date(2024, 5, 1))
        second = compute_schedule(Decimal("75000"), Decimal("16"), 18, start_date=date(2024, 5, 1))

        assert first == second


class TestValidateTerms:
    """Tests for loan term validation."""

    @pytest.mark.parametrize("principal", [0, "-100", "abc", 1000.0, "1E+27"])
    def test_invalid_principal(self, principal: object) -> None:
        with pytest.raises(InvalidArgumentError):
            compute_schedule(principal, Decimal("12"), 12)

    @pytest.mark.parametrize("rate", ["-1", "abc", 12.0, "NaN"])
    def test_invalid_rate(self, rate: object) -> None:
        with pytest.raises(InvalidArgumentError):
            compute_schedule(Decimal("1000"), rate, 12)

    @pytest.mark.parametrize("term", [0, -3, 12.0, "12", True])
    def test_invalid_term(self, term: object) -> None:
        with pytest.raises(InvalidArgumentError):
            compute_schedule(Decimal("1000"), Decimal("12"), term)

    def test_quantizes_principal(self) -> None:
        amount, rate, term = validate_terms("1000.005", "12", 6)

        assert amount == Decimal("1000.01")
        assert rate == Decimal("12")
        assert term == 6
