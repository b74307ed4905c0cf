from decimal import Decimal

import pytest

from src.staffing_billing.staffing_billing.documents.pdf_renderer import InvoicePdfRenderer, format_inr


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("0"), "Rs. 0.00"),
        (Decimal("999.5"), "Rs. 999.50"),
        (Decimal("15071"), "Rs. 15,071.00"),
        (Decimal("1234567.891"), "Rs. 12,34,567.89"),
        (Decimal("-100000"), "-Rs. 1,00,000.00"),
    ],
)
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


@pytest.fixture
def renderer():
    return InvoicePdfRenderer(business_name="ASHAPURI SECURITY SERVICES", tagline="Security & Manpower Solutions")


def test_renders_ordinary_invoice(renderer, create_invoice):
    inv = create_invoice(1, rows=[{"name": "Ravi", "presentDays": 28, "totalDays": 30}], bonusRate=8.33)

    data = renderer.render(inv)

    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_renders_merged_invoice_with_sources(renderer, create_invoice, merge_service):
    a, b = create_invoice(1), create_invoice(3, taxType="igst")
    result = merge_service.merge_invoices([a.invoice_id, b.invoice_id])

    data = renderer.render(result.invoice, result.sources)

    assert data.startswith(b"%PDF")
