"""EMI ledger: payment application and schedule projection for a loan."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from emi_ledger.config import PolicyConfig
from emi_ledger.core.amortization import compute_schedule
from emi_ledger.dates import due_date, same_month
from emi_ledger.exceptions import (
    AlreadySettledError,
    InsufficientPaymentError,
    InvalidArgumentError,
    InvalidStateError,
)
from emi_ledger.logging import log_context
from emi_ledger.models.enums import (
    ACTIVE_LOAN_STATUSES,
    EmiPaymentStatus,
    LoanStatus,
    PaymentMethod,
    ScheduleEntryStatus,
    ShortfallPolicy,
)
from emi_ledger.models.loan import EmiPayment, Loan
from emi_ledger.models.schedule import ScheduleEntry
from emi_ledger.money import ZERO, monthly_rate, to_money

logger = logging.getLogger(__name__)

# Statuses for which loan terms exist and a schedule can be projected
SCHEDULED_LOAN_STATUSES = ACTIVE_LOAN_STATUSES | {LoanStatus.COMPLETED}


def new_transaction_id(prefix: str, now: datetime | None = None) -> str:
    """Return ``{prefix}{yyyymmddHHMMSS}{8 hex}``, unique per call."""
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return f"{prefix}{stamp}{uuid.uuid4().hex[:8].upper()}"


class EmiLedger:
    """Single authority for a loan's running balance.

    Operates on a ``Loan`` in place. A call either raises before touching
    the loan or applies every change, so a failed payment leaves no trace.

    Parameters
    ----------
    policy : PolicyConfig | None
        Shortfall and due-date policies. Defaults to rejecting shortfalls
        and calendar-month due dates.
    """

    def __init__(self, policy: PolicyConfig | None = None) -> None:
        self.policy = policy or PolicyConfig()

    def accrued_interest(self, loan: Loan) -> Decimal:
        """Interest owed for the current period, including carried arrears."""
        period_interest = to_money(loan.remaining_balance * monthly_rate(loan.annual_interest_rate_percent))
        return period_interest + loan.interest_arrears

    def amount_due(self, loan: Loan) -> Decimal:
        """Installment owed for the next period.

        Equals the fixed monthly payment, except on the last installment of
        the term (or when less than a full payment is left), where it is the
        whole remaining balance plus accrued interest. Paying ``amount_due``
        every period therefore reproduces the schedule entry by entry and
        settles the loan on its final installment.

        Raises
        ------
        AlreadySettledError
            If nothing is owed.
        """
        if loan.status == LoanStatus.COMPLETED or loan.remaining_balance <= 0:
            raise AlreadySettledError(f"Loan {loan.loan_id} is already fully paid", loan_id=loan.loan_id)
        payoff = loan.remaining_balance + self.accrued_interest(loan)
        if loan.periods_paid + 1 >= loan.term_months:
            return payoff
        return min(loan.monthly_payment, payoff)

    def apply_payment(
        self,
        loan: Loan,
        amount_paid: Decimal | int | str,
        payment_method: PaymentMethod | str = PaymentMethod.ONLINE,
        payment_date: date | None = None,
    ) -> EmiPayment:
        """Apply a payment to a loan, interest first.

        Parameters
        ----------
        loan : Loan
            An approved or disbursed loan with an outstanding balance.
        amount_paid : Decimal | int | str
            Amount tendered. Must be positive.
        payment_method : PaymentMethod | str
            One of online, bank_transfer, cash, cheque.
        payment_date : date | None
            Value date of the payment (default: today).

        Returns
        -------
        EmiPayment
            The payment record, already appended to ``loan.payment_history``.

        Raises
        ------
        AlreadySettledError
            If the loan is completed or its balance is already zero.
        InvalidStateError
            If the loan is not approved or disbursed.
        InvalidArgumentError
            If the amount is not positive or the method is unknown.
        InsufficientPaymentError
            If the amount does not cover accrued interest and the shortfall
            policy is ``REJECT``.
        """
        if loan.status == LoanStatus.COMPLETED:
            raise AlreadySettledError(f"Loan {loan.loan_id} is already fully paid", loan_id=loan.loan_id)
        if loan.status not in ACTIVE_LOAN_STATUSES:
            raise InvalidStateError(
                f"Loan {loan.loan_id} does not accept payments in status {loan.status.value}",
                loan_id=loan.loan_id,
                status=loan.status.value,
            )
        if loan.remaining_balance <= 0:
            raise AlreadySettledError(f"Loan {loan.loan_id} has no outstanding balance", loan_id=loan.loan_id)

        amount = _positive_amount(amount_paid, loan.loan_id)
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown payment method: {payment_method!r}", loan_id=loan.loan_id
            ) from None

        paid_on = payment_date or date.today()
        balance = loan.remaining_balance
        accrued = self.accrued_interest(loan)

        if amount < accrued:
            if self.policy.shortfall == ShortfallPolicy.REJECT:
                raise InsufficientPaymentError(
                    f"Payment {amount} does not cover accrued interest {accrued} on loan {loan.loan_id}",
                    loan_id=loan.loan_id,
                    amount_paid=amount,
                    accrued_interest=accrued,
                )
            interest = amount
            principal = ZERO
            arrears = accrued - amount
        else:
            interest = accrued
            principal = min(amount - accrued, balance)
            arrears = ZERO

        applied = principal + interest
        new_balance = max(ZERO, balance - principal)

        payment = EmiPayment(
            transaction_id=new_transaction_id("EMI"),
            loan_id=loan.loan_id,
            payment_date=paid_on,
            amount_paid=applied,
            principal_component=principal,
            interest_component=interest,
            balance_after=new_balance,
            payment_method=method,
            status=EmiPaymentStatus.COMPLETED,
            excess_amount=amount - applied,
            created_at=datetime.now(),
        )

        loan.payment_history.append(payment)
        loan.remaining_balance = new_balance
        loan.interest_arrears = arrears
        loan.updated_at = payment.created_at
        if new_balance == 0:
            loan.status = LoanStatus.COMPLETED
            loan.next_due_date = None
            loan.completion_date = paid_on
        else:
            loan.next_due_date = self._due_date(loan, loan.periods_paid + 1)

        logger.info(
            "Applied %s to loan %s: principal=%s interest=%s balance=%s",
            applied,
            loan.loan_id,
            principal,
            interest,
            new_balance,
            extra=log_context(loan_id=loan.loan_id, transaction_id=payment.transaction_id),
        )
        if arrears:
            logger.warning(
                "Loan %s carries %s unpaid interest",
                loan.loan_id,
                arrears,
                extra=log_context(loan_id=loan.loan_id, arrears=arrears),
            )

        return payment

    def build_schedule(self, loan: Loan, today: date | None = None) -> list[ScheduleEntry]:
        """Project the loan's schedule with actual payments overlaid.

        Payments are matched to installments by the calendar month of the
        payment date. A payment with no unmatched installment in its month
        settles the earliest unmatched installment. Unpaid installments due
        before ``today`` are overdue. The loan is not modified.

        Raises
        ------
        InvalidStateError
            If the loan has not been approved yet.
        """
        if loan.status not in SCHEDULED_LOAN_STATUSES or loan.approval_date is None:
            raise InvalidStateError(
                f"Loan {loan.loan_id} has no approved terms (status {loan.status.value})",
                loan_id=loan.loan_id,
                status=loan.status.value,
            )

        today = today or date.today()
        schedule = compute_schedule(
            loan.principal,
            loan.annual_interest_rate_percent,
            loan.term_months,
            start_date=loan.approval_date,
            due_date_policy=self.policy.due_dates,
        )
        entries = schedule.entries
        matched: dict[int, EmiPayment] = {}

        payments = [p for p in loan.payment_history if p.status == EmiPaymentStatus.COMPLETED]
        unplaced: list[EmiPayment] = []
        for payment in payments:
            for idx, entry in enumerate(entries):
                if idx not in matched and same_month(entry.due_date, payment.payment_date):
                    matched[idx] = payment
                    break
            else:
                unplaced.append(payment)

        for payment in unplaced:
            for idx in range(len(entries)):
                if idx not in matched:
                    matched[idx] = payment
                    break

        rows = []
        for idx, entry in enumerate(entries):
            payment = matched.get(idx)
            if payment is not None:
                status = ScheduleEntryStatus.PAID
            elif entry.due_date < today:
                status = ScheduleEntryStatus.OVERDUE
            else:
                status = ScheduleEntryStatus.PENDING
            rows.append(
                ScheduleEntry(
                    installment_number=entry.installment_number,
                    due_date=entry.due_date,
                    emi_amount=entry.payment,
                    principal_component=entry.principal_component,
                    interest_component=entry.interest_component,
                    balance_after_payment=entry.balance_after,
                    status=status,
                    paid_date=payment.payment_date if payment else None,
                    transaction_id=payment.transaction_id if payment else None,
                )
            )
        return rows

    def _due_date(self, loan: Loan, installment_number: int) -> date:
        if loan.approval_date is None:
            raise InvalidStateError(f"Loan {loan.loan_id} has no approval date", loan_id=loan.loan_id)
        return due_date(loan.approval_date, installment_number, self.policy.due_dates)


def _positive_amount(value: Decimal | int | str, loan_id: str) -> Decimal:
    try:
        amount = to_money(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Not a valid amount: {value!r}", loan_id=loan_id) from exc
    if amount <= 0:
        raise InvalidArgumentError(f"Payment must be positive, got {amount}", loan_id=loan_id)
    return amount
