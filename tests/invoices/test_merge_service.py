import pytest

from src.staffing_billing.staffing_billing.core.enums import FileType, InvoiceStatus
from src.staffing_billing.staffing_billing.core.exceptions import DocumentError, NotFoundError, ValidationError
from src.staffing_billing.staffing_billing.invoices.merge_service import InvoiceMergeService
from src.staffing_billing.staffing_billing.invoices.model import InvoiceFilter


@pytest.fixture
def two_invoices(create_invoice):
    return create_invoice(1), create_invoice(2)


def test_merge_creates_record_and_pdf(merge_service, two_invoices, storage, invoice_repo):
    a, b = two_invoices

    result = merge_service.merge_invoices([a.invoice_id, str(b.invoice_id)], notes="March combined")

    merged = result.invoice
    assert result.pdf_generated is True
    assert merged.invoice_number == "MINV-2026-001"
    assert merged.is_merged is True
    assert merged.source_invoice_ids == (a.invoice_id, b.invoice_id)
    assert merged.notes == "March combined"
    assert merged.file.file_type == FileType.PDF
    assert merged.file.file_url == "/uploads/merged-invoices/MINV-2026-001.pdf"
    assert storage.files["merged-invoices/MINV-2026-001.pdf"].startswith(b"%PDF")
    assert merged.bill_details.total_amount == a.bill_details.total_amount + b.bill_details.total_amount
    assert invoice_repo.count(InvoiceFilter(is_merged=True)) == 1


@pytest.mark.parametrize(
    "ids, message",
    [
        ([1], "At least 2 invoice IDs"),
        ("1,2", "At least 2 invoice IDs"),
        ([1, 1], "Duplicate invoice IDs: 1"),
        ([1, "abc"], "Invalid invoice IDs: abc"),
    ],
)
def test_merge_rejects_bad_id_lists(merge_service, two_invoices, sequences, ids, message):
    with pytest.raises(ValidationError, match=message):
        merge_service.merge_invoices(ids)
    assert "merged-invoice:2026" not in sequences.values


def test_merge_reports_missing_invoices_without_writing(merge_service, two_invoices, invoice_repo, sequences):
    with pytest.raises(NotFoundError, match="Invoices not found: 99"):
        merge_service.merge_invoices([1, 99])

    assert invoice_repo.count(InvoiceFilter(is_merged=True)) == 0
    assert "merged-invoice:2026" not in sequences.values


def test_merge_rejects_cancelled_and_merged_sources(merge_service, two_invoices, invoice_repo, create_invoice):
    a, b = two_invoices
    invoice_repo.set_status(b.invoice_id, InvoiceStatus.CANCELLED)

    with pytest.raises(ValidationError, match="cancelled"):
        merge_service.merge_invoices([a.invoice_id, b.invoice_id])

    c = create_invoice(3)
    merged = merge_service.merge_invoices([a.invoice_id, c.invoice_id]).invoice
    with pytest.raises(ValidationError, match="already merged"):
        merge_service.merge_invoices([merged.invoice_id, a.invoice_id])


def test_failed_insert_leaves_no_record(merge_service, two_invoices, invoice_repo):
    invoice_repo.fail_on_create = True

    with pytest.raises(RuntimeError):
        merge_service.merge_invoices([1, 2])

    assert invoice_repo.count(InvoiceFilter(is_merged=True)) == 0


@pytest.mark.parametrize("publisher_fixture", ["failing_publisher", "broken_storage_publisher"])
def test_pdf_failure_does_not_fail_the_merge(
    request, invoice_repo, numbers, invoice_service, two_invoices, publisher_fixture
):
    service = InvoiceMergeService(
        invoice_repo, numbers, invoice_service, documents=request.getfixturevalue(publisher_fixture)
    )

    result = service.merge_invoices([1, 2])

    assert result.pdf_generated is False
    assert result.invoice.is_merged is True
    assert result.invoice.file.file_url == ""
    with pytest.raises(NotFoundError):
        service.document_url(result.invoice.invoice_id)


def test_merged_details_and_delete(merge_service, two_invoices):
    a, b = two_invoices
    merged = merge_service.merge_invoices([a.invoice_id, b.invoice_id]).invoice

    details = merge_service.get_merged_details(merged.invoice_id)
    assert [s.invoice_number for s in details.sources] == [a.invoice_number, b.invoice_number]

    with pytest.raises(ValidationError, match="not a merged invoice"):
        merge_service.get_merged_details(a.invoice_id)
    with pytest.raises(ValidationError):
        merge_service.delete_merged(a.invoice_id)

    merge_service.delete_merged(merged.invoice_id)

    with pytest.raises(NotFoundError):
        merge_service.get_merged_details(merged.invoice_id)
    assert merge_service.list_all().total == 2


def test_available_for_merge_excludes_merged_and_cancelled(merge_service, create_invoice, invoice_repo):
    a, b, c = create_invoice(1), create_invoice(1), create_invoice(2)
    invoice_repo.set_status(c.invoice_id, InvoiceStatus.CANCELLED)
    merge_service.merge_invoices([a.invoice_id, b.invoice_id])

    page = merge_service.available_for_merge()
    assert {i.invoice_id for i in page.items} == {a.invoice_id, b.invoice_id}

    page = merge_service.available_for_merge(company_id=2)
    assert page.items == []


def test_list_merged(merge_service, two_invoices):
    merge_service.merge_invoices([1, 2])

    page = merge_service.list_merged()
    assert [i.invoice_number for i in page.items] == ["MINV-2026-001"]
    assert merge_service.list_merged(status=InvoiceStatus.PAID).total == 0


def test_admin_stats(merge_service, two_invoices):
    merge_service.merge_invoices([1, 2])

    stats = merge_service.admin_stats()

    assert stats["overall"]["totalInvoices"] == 3
    assert stats["overall"]["mergedCount"] == 1
    assert stats["overall"]["regularCount"] == 2
    assert stats["byStatus"] == [{"_id": "draft", "count": 3, "amount": stats["overall"]["totalAmount"]}]
    assert stats["byCompany"][0]["company"] == "Alpha Industries"
    assert stats["recentMerged"][0]["invoiceNumber"] == "MINV-2026-001"


def test_document_url_and_render(merge_service, two_invoices):
    merged = merge_service.merge_invoices([1, 2]).invoice

    assert merge_service.document_url(merged.invoice_id) == merged.file.file_url
    file_name, data = merge_service.render_pdf(merged.invoice_id)
    assert file_name == "MINV-2026-001.pdf"
    assert data.startswith(b"%PDF")


def test_render_requires_a_publisher(invoice_repo, numbers, invoice_service, two_invoices):
    service = InvoiceMergeService(invoice_repo, numbers, invoice_service)

    with pytest.raises(DocumentError):
        service.render_pdf(1)
