"""Due-date arithmetic shared by the schedule and the ledger."""

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from emi_ledger.models.enums import DueDatePolicy


def due_date(
    anchor: date,
    installment_number: int,
    policy: DueDatePolicy = DueDatePolicy.CALENDAR_MONTH,
) -> date:
    """Return the due date of an installment.

    Always offsets from ``anchor`` rather than from the previous due date, so
    a loan approved on the 31st keeps falling due on the last day of short
    months and returns to the 31st afterwards.

    Parameters
    ----------
    anchor : date
        Approval date of the loan.
    installment_number : int
        1-based installment number.
    policy : DueDatePolicy
        Calendar months (default) or fixed 30-day periods.
    """
    if policy == DueDatePolicy.FIXED_30_DAY:
        return anchor + timedelta(days=30 * installment_number)
    return anchor + relativedelta(months=installment_number)


def same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)
