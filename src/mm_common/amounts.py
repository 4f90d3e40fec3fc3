"""Integer arithmetic utilities for rupee amounts.

All principal, loan, EMI and settlement amounts are int (whole rupees).
"""


def rupees_to_display(amount: int) -> str:
    """Format with Indian digit grouping: 150000 -> '₹1,50,000', -1200 -> '-₹1,200'."""
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))
    if len(digits) <= 3:
        return f"{sign}₹{digits}"
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}₹{','.join(groups)},{tail}"


def total_amount(
    principal_amount: int,
    loan_interest_amount: int,
    loan_emi: int,
    penalty_amount: int,
) -> int:
    """Amount collected for one transaction: principal + interest + EMI + penalty."""
    return principal_amount + loan_interest_amount + loan_emi + penalty_amount
