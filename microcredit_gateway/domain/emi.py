"""EMI calculation and monthly repayment schedules for loan applications"""

import math
from datetime import date
from typing import List

from microcredit_gateway.domain.models import Installment, LoanSummary
from microcredit_gateway.utils.date_utils import add_months, generate_monthly_dates

PROCESSING_FEE_RATE = 0.01


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _exact_emi(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    if principal <= 0 or tenure_months <= 0:
        return 0.0

    monthly_rate = annual_rate_percent / 12 / 100
    if monthly_rate == 0:
        return principal / tenure_months

    growth = (1 + monthly_rate) ** tenure_months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_emi(principal: float, annual_rate_percent: float, tenure_months: int) -> int:
    """
    Equated monthly instalment, rounded to the nearest rupee.

        EMI = P * r * (1 + r)^n / ((1 + r)^n - 1),  r = annual_rate / 12 / 100

    Returns 0 when there is nothing to repay or no tenure.

    Example:
        100000 at 12% over 12 months -> 8885
    """
    return round_half_up(_exact_emi(principal, annual_rate_percent, tenure_months))


def calculate_processing_fee(principal: float) -> int:
    """One-time 1% processing fee"""
    return round_half_up(principal * PROCESSING_FEE_RATE)


def generate_repayment_schedule(
    principal: float,
    annual_rate_percent: float,
    tenure_months: int,
    start_date: date | None = None,
) -> List[Installment]:
    """
    Generate monthly EMI instalments.

    Requirements:
    - One instalment per month of tenure
    - Every instalment equals the rounded EMI except the last
    - Last instalment absorbs rounding so the total matches the exact EMI total

    Args:
        principal: Loan amount
        annual_rate_percent: Interest rate per annum
        tenure_months: Number of monthly payments
        start_date: First due date (default: one month from today)
    """
    if principal <= 0 or tenure_months <= 0:
        return []

    if start_date is None:
        start_date = add_months(date.today(), 1)

    exact = _exact_emi(principal, annual_rate_percent, tenure_months)
    emi = round_half_up(exact)
    total = round_half_up(exact * tenure_months)

    installments = []
    for i, due_date in enumerate(generate_monthly_dates(start_date, tenure_months)):
        # Last instalment absorbs remainder to ensure exact total
        amount = total - emi * (tenure_months - 1) if i == tenure_months - 1 else emi
        installments.append(Installment(due_date=due_date, amount=amount))

    return installments


def summarize_loan(
    principal: int,
    annual_rate_percent: float,
    tenure_months: int,
    start_date: date | None = None,
) -> LoanSummary:
    """Review-step figures: EMI, fee and repayment schedule"""
    return LoanSummary(
        loan_amount=principal,
        tenure_months=tenure_months,
        interest=annual_rate_percent,
        emi=calculate_emi(principal, annual_rate_percent, tenure_months),
        processing_fee=calculate_processing_fee(principal),
        schedule=generate_repayment_schedule(principal, annual_rate_percent, tenure_months, start_date),
    )
