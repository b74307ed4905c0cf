from decimal import Decimal

from src.staffing_billing.staffing_billing.common.money import round_half_up
from src.staffing_billing.staffing_billing.core.enums import GstPaidBy, TaxType
from src.staffing_billing.staffing_billing.invoices.calculator import InvoiceTotalsCalculator, grand_total, tax_breakdown
from src.staffing_billing.staffing_billing.invoices.rates import resolve_rate_config
from src.staffing_billing.staffing_billing.payroll.model import ProcessedEmployee


def _employee(regular, overtime=0):
    regular, overtime = Decimal(str(regular)), Decimal(str(overtime))
    return ProcessedEmployee(
        name="E",
        present_days=regular + overtime,
        regular_days=regular,
        overtime_days=overtime,
        total_days=Decimal("30"),
        salary=Decimal("0"),
    )


def test_single_employee_default_rates():
    totals = InvoiceTotalsCalculator().calculate([_employee(26)], resolve_rate_config({}))

    assert totals.base_total == Decimal("12116")
    assert totals.pf == Decimal("1575.08")
    assert totals.esic == Decimal("393.77")
    assert totals.sub_total == Decimal("14084.85")
    assert totals.round_off_sub_total == Decimal("14085")
    assert totals.round_off_difference == Decimal("0.15")
    assert totals.service_charge == Decimal("985.95")
    assert totals.total_before_tax == Decimal("15070.95")
    # reverse charge: GST shown but not added
    assert totals.grand_total == Decimal("15071")
    assert totals.bill_details.gst_amount == Decimal("2712.77")
    assert totals.bill_details.total_amount == Decimal("15071")
    assert totals.grand_total_in_words == "FIFTEEN THOUSAND SEVENTY ONE RUPEES ONLY"


def test_statutory_charges_apply_to_overtime_wages():
    rates = resolve_rate_config({"perDayRate": 500, "bonusRate": 8.33})

    totals = InvoiceTotalsCalculator().calculate([_employee(26, 2)], rates)

    assert totals.overtime_amount == Decimal("1500")
    assert totals.statutory_base == Decimal("14500")
    assert totals.pf == Decimal("1885")
    assert totals.bonus == Decimal("1207.85")


def test_reverse_charge_excludes_tax_from_grand_total():
    tbt = Decimal("100000")

    gst = tax_breakdown(tbt, TaxType.GST)
    igst = tax_breakdown(tbt, TaxType.IGST)

    assert gst.cgst == gst.sgst == Decimal("9000")
    assert igst.igst == Decimal("18000")
    assert grand_total(tbt, gst, GstPaidBy.PRINCIPAL_EMPLOYER) == Decimal("100000")
    assert grand_total(tbt, gst, GstPaidBy.ASHAPURI) == Decimal("118000")
    assert grand_total(tbt, igst, GstPaidBy.ASHAPURI) == Decimal("118000")


def test_grand_total_paid_by_supplier_through_full_pipeline():
    base = {"perDayRate": "86021.5", "serviceChargeRate": 0}
    calc = InvoiceTotalsCalculator()

    reverse = calc.calculate([_employee(1)], resolve_rate_config(base))
    supplier = calc.calculate([_employee(1)], resolve_rate_config({**base, "gstPaidBy": "ashapuri"}))

    assert reverse.total_before_tax == Decimal("100000")
    assert reverse.grand_total == Decimal("100000")
    assert supplier.grand_total == Decimal("118000")
    assert supplier.grand_total_in_words == "ONE LAKH EIGHTEEN THOUSAND RUPEES ONLY"


def test_rounding_is_half_up():
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("10.5")) == 11
    assert round_half_up(Decimal("10.49")) == 10


def test_more_days_never_lowers_the_total():
    calc = InvoiceTotalsCalculator()
    rates = resolve_rate_config({})
    previous = Decimal("-1")
    for days in range(0, 32):
        total = calc.calculate([_employee(days)], rates).grand_total
        assert total >= previous
        previous = total


def test_calculation_is_deterministic():
    calc = InvoiceTotalsCalculator()
    rates = resolve_rate_config({"bonusRate": 8.33, "taxType": "igst"})
    employees = [_employee(26, 3), _employee(12.5)]

    assert calc.calculate(employees, rates) == calc.calculate(employees, rates)


def test_empty_invoice_totals_zero():
    totals = InvoiceTotalsCalculator().calculate([], resolve_rate_config({}))

    assert totals.grand_total == 0
    assert totals.grand_total_in_words == "ZERO RUPEES ONLY"


def test_aggregate_reports_regular_days_and_rate():
    employees = [_employee(26, 2), _employee(26, 5), _employee(0)]
    rates = resolve_rate_config({"perDayRate": 500})
    totals = InvoiceTotalsCalculator().calculate(employees, rates)

    agg = InvoiceTotalsCalculator.aggregate(employees, totals, per_day_rate=rates.per_day_rate, working_days=Decimal("30"))

    assert agg.total_employees == 3
    assert agg.total_regular_days == 52
    assert agg.total_overtime_days == 7
    assert agg.per_day_rate == 500
