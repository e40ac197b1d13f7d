"""
Financing simulator and pre-approval requests.

The quote is the standard fixed-payment amortization:

    payment = loan * r / (1 - (1 + r) ** -n)

with ``r`` the monthly rate (annual / 12) and ``n`` the term in months.
Payments are rounded to whole pesos; totals are derived from the rounded
payment so that ``total_paid - loan_amount == total_interest`` holds exactly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict

from dealership.exceptions import ValidationError
from dealership.services.common import _store, to_float_safe, to_int_safe
from dealership.utils.constants import (
    Table, DEFAULT_TERM_MONTHS, DEFAULT_ANNUAL_RATE, MIN_NET_INCOME, EMPLOYMENT_STATUSES,
)
from dealership.utils.filters import fmt_clp, utc_now_iso
from dealership.utils.validators import clean, require, valid_email, valid_phone, valid_rut

logger = logging.getLogger(__name__)

TRADE_IN_FIELDS = ("brand", "model", "year", "mileage", "condition")


def monthly_payment(price: float, down_payment: float = 0, months: int = DEFAULT_TERM_MONTHS,
                    annual_rate: float = DEFAULT_ANNUAL_RATE) -> int:
    loan = price - down_payment
    if loan <= 0:
        return 0
    r = annual_rate / 12
    if r == 0:
        return round(loan / months)
    return round(loan * r / (1 - (1 + r) ** -months))


@dataclass
class FinancingQuote:
    price: float
    down_payment: float
    months: int
    annual_rate: float
    loan_amount: float
    monthly_payment: int
    total_paid: float
    total_interest: float
    total_cost: float

    def to_dict(self) -> dict:
        d = asdict(self)
        d["formatted"] = {
            "monthly_payment": fmt_clp(self.monthly_payment),
            "loan_amount": fmt_clp(self.loan_amount),
            "total_interest": fmt_clp(self.total_interest),
            "total_cost": fmt_clp(self.total_cost),
        }
        return d


class FinancingService:

    @staticmethod
    def quote(price, down_payment=0, months=DEFAULT_TERM_MONTHS,
              annual_rate=DEFAULT_ANNUAL_RATE) -> FinancingQuote:
        errors: dict[str, str] = {}
        p = to_float_safe(price)
        dp = to_float_safe(down_payment if down_payment not in (None, "") else 0)
        n = to_int_safe(months if months not in (None, "") else DEFAULT_TERM_MONTHS)
        rate = to_float_safe(annual_rate if annual_rate not in (None, "") else DEFAULT_ANNUAL_RATE)

        if p is None or p <= 0:
            errors["price"] = "price must be a positive number"
        if dp is None or dp < 0:
            errors["down_payment"] = "down payment must be a non-negative number"
        elif p is not None and dp > p:
            errors["down_payment"] = "down payment cannot exceed the price"
        if n is None or n <= 0:
            errors["months"] = "term must be a positive number of months"
        if rate is None or rate < 0:
            errors["annual_rate"] = "rate must be a non-negative number"
        if errors:
            raise ValidationError("Error: invalid financing parameters", fields=errors)

        loan = p - dp
        payment = monthly_payment(p, dp, n, rate)
        total_paid = payment * n
        total_interest = total_paid - loan
        return FinancingQuote(
            price=p, down_payment=dp, months=n, annual_rate=rate,
            loan_amount=loan, monthly_payment=payment,
            total_paid=total_paid, total_interest=total_interest,
            total_cost=total_paid + dp,
        )

    @staticmethod
    def validate_application(form: dict) -> dict:
        errors: dict[str, str] = {}
        require(form, ("rut", "email", "phone", "net_income", "employment_status"), errors)

        rut = clean(form.get("rut"))
        if "rut" not in errors and not valid_rut(rut):
            errors["rut"] = "invalid RUT (format 12345678-9 or 12.345.678-9)"
        email = clean(form.get("email"))
        if "email" not in errors and not valid_email(email):
            errors["email"] = "invalid email"
        phone = clean(form.get("phone")).replace(" ", "")
        if "phone" not in errors and not valid_phone(phone):
            errors["phone"] = "phone must have 8 or 9 digits, e.g. 912345678"

        income = to_float_safe(form.get("net_income"))
        if "net_income" not in errors and (income is None or income < MIN_NET_INCOME):
            errors["net_income"] = f"net income must be at least {fmt_clp(MIN_NET_INCOME)}"

        status = clean(form.get("employment_status")).lower()
        if "employment_status" not in errors and status not in EMPLOYMENT_STATUSES:
            errors["employment_status"] = f"must be one of {', '.join(sorted(EMPLOYMENT_STATUSES))}"

        vehicle_price = form.get("vehicle_price")
        price = None
        if vehicle_price not in (None, ""):
            price = to_float_safe(vehicle_price)
            if price is None or price <= 0:
                errors["vehicle_price"] = "vehicle price must be a positive number"

        trade_in = form.get("trade_in")
        if trade_in:
            if not isinstance(trade_in, dict):
                errors["trade_in"] = "trade_in must be an object"
            else:
                for name in TRADE_IN_FIELDS:
                    if not clean(trade_in.get(name)):
                        errors[f"trade_in.{name}"] = f"{name} is required for a trade-in"

        if errors:
            raise ValidationError("Error: invalid financing application", fields=errors)

        return {
            "rut": rut.upper(),
            "email": email,
            "phone": phone,
            "net_income": income,
            "employment_status": status,
            "vehicle_price": price,
            "vehicle_of_interest": clean(form.get("vehicle_of_interest")) or None,
            "trade_in": {k: clean(trade_in.get(k)) for k in TRADE_IN_FIELDS} if trade_in else None,
        }

    @staticmethod
    def submit_application(form: dict, *, store=None) -> dict:
        """Validate and append one financing application; the simulation is attached when a price is given."""
        data = FinancingService.validate_application(form)
        if data["vehicle_price"]:
            data["quote"] = FinancingService.quote(data["vehicle_price"]).to_dict()
        st = store or _store()
        row = st.insert(Table.FINANCING, {**data, "submitted_at": utc_now_iso()})
        logger.info("Financing application %s stored", row["id"])
        return row
