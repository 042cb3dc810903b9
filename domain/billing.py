"""Billing Calculator"""
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from domain.entities import CheckedOutReservation
from domain.exceptions import InvalidCheckOutTimeError

WEEKDAY_RATE = Decimal("1.0")
WEEKEND_RATE = Decimal("1.1")
PROMOTION_RATE = Decimal("0.9")
TAX_RATE = Decimal("0.07")

CENT = Decimal("0.01")


class Bill(BaseModel):
    """Line-itemized invoice for a checked-out stay"""
    model_config = ConfigDict(frozen=True)

    reservation_code: UUID
    room_number: str
    days_stayed: int
    weekdays_stayed: int
    weekends_stayed: int
    room_price: Decimal
    service_price: Decimal
    raw_price: Decimal
    promotion_discount: Optional[Decimal] = None
    discounted_price: Decimal
    tax: Decimal
    total: Decimal

    @property
    def has_promotion(self) -> bool:
        return self.promotion_discount is not None

    def render(self) -> str:
        """Boxed text invoice"""
        rows = [
            ("Number of days stayed", str(self.days_stayed)),
            ("Number of weekdays stayed", str(self.weekdays_stayed)),
            ("Number of weekends stayed", str(self.weekends_stayed)),
            ("Total room price: ", _money(self.room_price)),
            ("Total service price: ", _money(self.service_price)),
        ]
        if self.has_promotion:
            percentage = (1 - PROMOTION_RATE) * 100
            rows.append((f"Promotion discount: (-%{percentage:.0f})", "-" + _money(self.promotion_discount)))
            rows.append(("Remaining price: ", _money(self.discounted_price)))
        else:
            rows.append(("Raw price: ", _money(self.raw_price)))
        rows.append(("Tax payable: ", _money(self.tax)))
        rows.append(("Total amount payable: ", _money(self.total)))

        separator = "-----------------------------+-----------------------------\n"
        lines = ["-----------------------BILL INVOICE------------------------\n"]
        for label, value in rows:
            lines.append(f"| {label:<27}| {value:<27}|\n")
            lines.append(separator)
        return "".join(lines)


def _money(amount: Decimal) -> str:
    return f"${amount.quantize(CENT)}"


def count_days(reservation: CheckedOutReservation) -> Tuple[int, int]:
    """(weekdays, weekends) stayed, counting each started whole day from check-in"""
    weekdays = 0
    weekends = 0
    for i in range(reservation.days_stayed()):
        if (reservation.check_in + timedelta(days=i)).isoweekday() <= 5:
            weekdays += 1
        else:
            weekends += 1
    return weekdays, weekends


def generate_bill(
    reservation: CheckedOutReservation,
    rate: Decimal,
    service_price: Decimal,
    has_promotion: bool
) -> Bill:
    """Compute the bill; promotion applies before tax"""
    if reservation.check_out < reservation.check_in:
        raise InvalidCheckOutTimeError()

    rate = Decimal(rate)
    service_price = Decimal(service_price)
    weekdays, weekends = count_days(reservation)

    room_price = weekdays * rate * WEEKDAY_RATE + weekends * rate * WEEKEND_RATE
    raw_price = room_price + service_price
    if has_promotion:
        discounted_price = raw_price * PROMOTION_RATE
        promotion_discount = raw_price - discounted_price
    else:
        discounted_price = raw_price
        promotion_discount = None
    tax = discounted_price * TAX_RATE
    total = discounted_price * (1 + TAX_RATE)

    return Bill(
        reservation_code=reservation.reservation_code,
        room_number=reservation.room_number,
        days_stayed=weekdays + weekends,
        weekdays_stayed=weekdays,
        weekends_stayed=weekends,
        room_price=room_price,
        service_price=service_price,
        raw_price=raw_price,
        promotion_discount=promotion_discount,
        discounted_price=discounted_price,
        tax=tax,
        total=total
    )
