from datetime import date, timedelta

from kindergarten.core.enums import DiscountType
from kindergarten.finance.calculator.base import FeeInput
from kindergarten.finance.calculator.standard_calculator import StandardFeeCalculator
from kindergarten.finance.model import Discount
from kindergarten.paid_services.model import ServiceUsage


def _weekdays(year: int, month: int, count: int) -> dict[date, bool]:
    out: dict[date, bool] = {}
    day = date(year, month, 1)
    while len(out) < count:
        if day.weekday() < 5:
            out[day] = True
        day += timedelta(days=1)
    return out


def _discount(discount_id: int, percent: float, kind=DiscountType.MANY_CHILDREN) -> Discount:
    return Discount(discount_id, child_id=1, year=2025, month=3, discount_type=kind, percent=percent)


def test_twenty_days_without_extras():
    calc = StandardFeeCalculator()
    bill = calc.calculate(FeeInput(attendance=_weekdays(2025, 3, 20)))

    assert bill.attended_days == 20
    assert bill.base_amount == 3880
    assert bill.total == 3880
    assert not bill.is_credit


def test_one_half_discount_halves_the_bill():
    calc = StandardFeeCalculator()
    bill = calc.calculate(FeeInput(attendance=_weekdays(2025, 3, 20), discounts=[_discount(1, 50)]))

    assert bill.discount_amount == 1940
    assert bill.total == 1940


def test_two_half_discounts_are_additive():
    calc = StandardFeeCalculator()
    discounts = [_discount(1, 50), _discount(2, 50, DiscountType.LOW_INCOME)]
    bill = calc.calculate(FeeInput(attendance=_weekdays(2025, 3, 20), discounts=discounts))

    assert bill.total == 0
    assert [d["amount"] for d in bill.discounts] == [1940, 1940]


def test_weekend_days_are_never_counted():
    attendance = {
        date(2025, 3, 1): True,  # Saturday
        date(2025, 3, 2): True,  # Sunday
        date(2025, 3, 3): True,
        date(2025, 3, 4): False,
    }
    bill = StandardFeeCalculator().calculate(FeeInput(attendance=attendance))

    assert bill.attended_days == 1
    assert bill.total == 194


def test_paid_group_fee_and_lessons():
    usage = [ServiceUsage(child_id=1, service_id=2, service_name="English", price_per_lesson=150, attended_lessons=4)]
    bill = StandardFeeCalculator().calculate(
        FeeInput(attendance=_weekdays(2025, 3, 10), is_paid_group=True, services=usage)
    )

    assert bill.paid_group_fee == 1300
    assert bill.services_amount == 600
    assert bill.total == 1940 + 1300 + 600


def test_discounts_apply_to_surcharge_but_not_lessons():
    usage = [ServiceUsage(1, 2, "Dance", 100, 2)]
    bill = StandardFeeCalculator().calculate(
        FeeInput(attendance={}, is_paid_group=True, discounts=[_discount(1, 10)], services=usage)
    )

    assert bill.discount_amount == 130
    assert bill.total == 1300 + 200 - 130


def test_stacked_discounts_produce_a_credit_instead_of_clamping():
    discounts = [_discount(1, 100, DiscountType.DISABLED_CHILD), _discount(2, 50)]
    bill = StandardFeeCalculator().calculate(FeeInput(attendance=_weekdays(2025, 3, 20), discounts=discounts))

    assert bill.total == -1940
    assert bill.is_credit


def test_rates_are_configurable():
    calc = StandardFeeCalculator(daily_rate=200, paid_group_fee=1000)
    bill = calc.calculate(FeeInput(attendance=_weekdays(2025, 3, 5), is_paid_group=True))

    assert bill.total == 2000
