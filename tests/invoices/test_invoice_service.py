from datetime import date
from decimal import Decimal

import pytest

from src.staffing_billing.staffing_billing.core.enums import InvoiceStatus, PaymentStatus
from src.staffing_billing.staffing_billing.core.exceptions import NotFoundError, ValidationError
from src.staffing_billing.staffing_billing.invoices.model import InvoiceFilter

ROWS = [
    {"name": "Ravi", "presentDays": 28, "totalDays": 30},
    {"name": "Meena", "present_day": 31, "total_day": 30},
    {"name": "Suresh", "presentDays": 0, "totalDays": 30},
    {"name": "", "presentDays": 12, "totalDays": 30},
]


def test_create_invoice_runs_the_whole_pipeline(invoice_service):
    created = invoice_service.create_invoice(company_id=1, attendance_rows=ROWS, rates={"perDayRate": 500})
    inv = created.invoice

    assert inv.invoice_number == "INV-2026-001"
    assert inv.status == InvoiceStatus.DRAFT
    assert inv.payment_status == PaymentStatus.PENDING
    assert inv.due_date == date(2026, 4, 14)
    assert inv.file.file_name == "INV-2026-001.pdf"
    assert inv.file.file_url == ""
    assert inv.bill_to.name == "Alpha Industries"
    assert inv.attendance.total_employees == 3
    assert inv.attendance.total_regular_days == Decimal("52")
    assert inv.attendance.total_overtime_days == Decimal("7")
    assert inv.attendance.per_day_rate == Decimal("500")
    assert inv.bill_details.total_amount == created.calculation.totals.grand_total
    assert created.calculation.dropped == 1
    assert created.calculation.batch.overtime_threshold == Decimal("26")


def test_numbers_increase_per_invoice(invoice_service):
    first = invoice_service.create_invoice(company_id=1, attendance_rows=ROWS).invoice
    second = invoice_service.create_invoice(company_id=2, attendance_rows=ROWS).invoice

    assert (first.invoice_number, second.invoice_number) == ("INV-2026-001", "INV-2026-002")


def test_create_rejects_bad_input(invoice_service):
    with pytest.raises(NotFoundError):
        invoice_service.create_invoice(company_id=99, attendance_rows=ROWS)
    with pytest.raises(ValidationError, match="Invalid company ID"):
        invoice_service.create_invoice(company_id="abc", attendance_rows=ROWS)
    with pytest.raises(ValidationError):
        invoice_service.create_invoice(company_id=1, attendance_rows={"name": "Ravi"})
    with pytest.raises(ValidationError):
        invoice_service.create_invoice(company_id=1, attendance_rows=ROWS, rates={"serviceChargeRate": 150})


def test_preview_writes_nothing(invoice_service, invoice_repo):
    calc = invoice_service.preview_totals(ROWS, {"gstPaidBy": "ashapuri"})

    assert calc.totals.grand_total > calc.totals.total_before_tax
    assert invoice_repo.count(InvoiceFilter()) == 0


def test_get_invoice_validates_id(invoice_service):
    with pytest.raises(ValidationError, match="Invalid invoice ID: x"):
        invoice_service.get_invoice("x")
    with pytest.raises(NotFoundError):
        invoice_service.get_invoice(42)


def test_list_invoices_paginates_newest_first(invoice_service, create_invoice):
    for _ in range(5):
        create_invoice(1)
    create_invoice(2)

    page = invoice_service.list_company_invoices(1, page=2, limit=2)

    assert page.total == 5
    assert page.pages == 3
    assert [i.invoice_number for i in page.items] == ["INV-2026-003", "INV-2026-002"]


@pytest.mark.parametrize(
    "page, limit",
    [(0, 20), ("0", 20), (1, 0), (1, "0"), (-1, 20), (1, 10_000), ("abc", 20)],
)
def test_list_invoices_rejects_bad_paging(invoice_service, page, limit):
    with pytest.raises(ValidationError):
        invoice_service.list_invoices(page=page, limit=limit)


def test_list_invoices_defaults_blank_paging(invoice_service, create_invoice):
    create_invoice(1)

    page = invoice_service.list_invoices(page="", limit=None)

    assert (page.page, page.limit, page.total) == (1, 20, 1)


def test_update_changes_lifecycle_fields_only(invoice_service, create_invoice):
    inv = create_invoice(1)

    updated = invoice_service.update_invoice(
        inv.invoice_id,
        status="sent",
        payment_status="paid",
        bill_to={"name": "Alpha Industries Pvt Ltd", "gstNumber": "24aaaca1234a1z5"},
        notes="Sent by courier",
    )

    assert updated.status == InvoiceStatus.SENT
    assert updated.payment_status == PaymentStatus.PAID
    assert updated.payment_date is not None
    assert updated.bill_to.name == "Alpha Industries Pvt Ltd"
    assert updated.bill_to.gst_number == "24AAACA1234A1Z5"
    assert updated.bill_to.address == inv.bill_to.address
    assert updated.notes == "Sent by courier"
    assert updated.bill_details == inv.bill_details


@pytest.mark.parametrize(
    "changes",
    [
        {"status": "archived"},
        {"payment_status": "refunded"},
        {"bill_to": {"name": "A"}},
        {"bill_to": {"gstNumber": "NOT-A-GSTIN"}},
        {"notes": "x" * 1001},
    ],
)
def test_update_validation(invoice_service, create_invoice, changes):
    inv = create_invoice(1)

    with pytest.raises(ValidationError):
        invoice_service.update_invoice(inv.invoice_id, **changes)


def test_delete_invoice(invoice_service, create_invoice):
    inv = create_invoice(1)

    invoice_service.delete_invoice(inv.invoice_id)

    with pytest.raises(NotFoundError):
        invoice_service.get_invoice(inv.invoice_id)


def test_company_stats(invoice_service, create_invoice):
    a = create_invoice(1)
    b = create_invoice(1)
    create_invoice(2)
    invoice_service.update_invoice(a.invoice_id, status="sent", payment_status="paid")

    stats = invoice_service.company_stats(1)

    assert stats["totalInvoices"] == 2
    assert stats["paidCount"] == 1
    assert stats["sentCount"] == 1
    assert stats["draftCount"] == 1
    assert Decimal(str(stats["paidAmount"])) == a.bill_details.total_amount
    assert Decimal(str(stats["pendingAmount"])) == b.bill_details.total_amount


def test_salary_register_is_xlsx(invoice_service, create_invoice):
    inv = create_invoice(1)

    file_name, data = invoice_service.salary_register(inv.invoice_id)

    assert file_name == f"{inv.invoice_number}-salary.xlsx"
    assert data[:2] == b"PK"
