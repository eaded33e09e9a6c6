"""Loan status transitions ahead of the ledger.

Approval is the only writer of a loan's principal, rate and term.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from emi_ledger.core.amortization import monthly_payment, validate_terms
from emi_ledger.core.eligibility import evaluate
from emi_ledger.dates import due_date
from emi_ledger.exceptions import IneligibleError, InvalidArgumentError, InvalidStateError
from emi_ledger.models.enums import (
    REVIEWABLE_LOAN_STATUSES,
    DueDatePolicy,
    KycStatus,
    LoanStatus,
)
from emi_ledger.models.loan import Loan
from emi_ledger.money import to_money

logger = logging.getLogger(__name__)

REJECTABLE_LOAN_STATUSES = REVIEWABLE_LOAN_STATUSES | {LoanStatus.DRAFT}


def create_draft(
    owner_id: str,
    uhid: str,
    kyc_status: KycStatus | str,
    requested_amount: Decimal | int | str,
    application_number: str,
    loan_id: str | None = None,
) -> Loan:
    """Open a draft loan application for a KYC-verified borrower.

    Raises
    ------
    InvalidStateError
        If the borrower's KYC is not verified.
    InvalidArgumentError
        If the requested amount is not positive.
    """
    try:
        kyc = KycStatus(kyc_status)
    except ValueError:
        raise InvalidArgumentError(f"Unknown KYC status: {kyc_status!r}") from None
    if kyc != KycStatus.VERIFIED:
        raise InvalidStateError(f"KYC for owner {owner_id} is not verified", owner_id=owner_id)

    try:
        amount = to_money(requested_amount)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Not a valid amount: {requested_amount!r}") from exc
    if amount <= 0:
        raise InvalidArgumentError(f"Requested amount must be positive, got {amount}")

    loan = Loan(
        loan_id=loan_id or str(uuid.uuid4()),
        owner_id=owner_id,
        uhid=uhid,
        application_number=application_number,
        status=LoanStatus.DRAFT,
        requested_amount=amount,
        created_at=datetime.now(),
    )
    logger.info("Draft loan %s (%s) opened for %s", loan.loan_id, application_number, owner_id)
    return loan


def submit(loan: Loan, submitted_on: date | None = None) -> Loan:
    """Move a draft to submitted."""
    _require(loan, {LoanStatus.DRAFT}, "submit")
    loan.status = LoanStatus.SUBMITTED
    loan.submission_date = submitted_on or date.today()
    loan.updated_at = datetime.now()
    return loan


def start_review(loan: Loan) -> Loan:
    _require(loan, {LoanStatus.SUBMITTED}, "review")
    loan.status = LoanStatus.UNDER_REVIEW
    loan.updated_at = datetime.now()
    return loan


def approve(
    loan: Loan,
    principal: Decimal | int | str,
    annual_rate_percent: Decimal | int | str,
    term_months: int,
    approval_date: date | None = None,
    due_date_policy: DueDatePolicy = DueDatePolicy.CALENDAR_MONTH,
) -> Loan:
    """Approve a submitted loan and fix its repayment terms.

    The monthly payment is computed once here and never recomputed from the
    remaining balance.

    Raises
    ------
    InvalidStateError
        If the loan is not submitted or under review.
    InvalidArgumentError
        If the terms are out of range.
    """
    _require(loan, REVIEWABLE_LOAN_STATUSES, "approve")
    amount, rate, term = validate_terms(principal, annual_rate_percent, term_months)
    payment = monthly_payment(amount, rate, term)
    approved_on = approval_date or date.today()

    loan.principal = amount
    loan.annual_interest_rate_percent = rate
    loan.term_months = term
    loan.monthly_payment = payment
    loan.remaining_balance = amount
    loan.approval_date = approved_on
    loan.next_due_date = due_date(approved_on, 1, due_date_policy)
    loan.status = LoanStatus.APPROVED
    loan.updated_at = datetime.now()

    logger.info(
        "Approved loan %s: principal=%s rate=%s%% term=%d emi=%s",
        loan.loan_id,
        amount,
        rate,
        term,
        payment,
    )
    return loan


def approve_with_credit_score(
    loan: Loan,
    credit_score: int,
    term_months: int,
    approval_date: date | None = None,
    due_date_policy: DueDatePolicy = DueDatePolicy.CALENDAR_MONTH,
) -> Loan:
    """Approve using the credit tier's rate, capping the requested amount.

    Raises
    ------
    IneligibleError
        If the score qualifies for no tier. The loan is left unchanged.
    """
    _require(loan, REVIEWABLE_LOAN_STATUSES, "approve")
    result = evaluate(credit_score)
    if not result.eligible:
        raise IneligibleError(
            f"Credit score {credit_score} is below every lending tier",
            loan_id=loan.loan_id,
            credit_score=credit_score,
        )

    approve(
        loan,
        principal=min(loan.requested_amount, result.max_eligible_amount),
        annual_rate_percent=result.annual_interest_rate_percent,
        term_months=term_months,
        approval_date=approval_date,
        due_date_policy=due_date_policy,
    )
    loan.credit_score = credit_score
    loan.max_eligible_amount = result.max_eligible_amount
    return loan


def reject(loan: Loan, reason: str) -> Loan:
    _require(loan, REJECTABLE_LOAN_STATUSES, "reject")
    loan.status = LoanStatus.REJECTED
    loan.rejection_reason = reason
    loan.updated_at = datetime.now()
    logger.info("Rejected loan %s: %s", loan.loan_id, reason)
    return loan


def _require(loan: Loan, allowed: set[LoanStatus] | frozenset[LoanStatus], action: str) -> None:
    if loan.status not in allowed:
        raise InvalidStateError(
            f"Cannot {action} loan {loan.loan_id} in status {loan.status.value}",
            loan_id=loan.loan_id,
            status=loan.status.value,
        )
