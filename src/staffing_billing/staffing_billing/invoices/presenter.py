"""JSON shapes for the HTTP layer (camelCase keys, numbers not strings)."""

from __future__ import annotations

from dataclasses import fields
from datetime import date
from typing import Any, Optional

from ..common.money import as_number
from ..payroll.model import PayrollBatch, ProcessedEmployee
from .model import BillDetails, Invoice, InvoiceTotals, Page


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def bill_details_to_dict(bill: BillDetails) -> dict[str, Any]:
    return {camel(f.name): as_number(getattr(bill, f.name)) for f in fields(bill)}


def employee_to_dict(e: ProcessedEmployee) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": e.name,
        "presentDays": as_number(e.present_days),
        "regularDays": as_number(e.regular_days),
        "overtimeDays": as_number(e.overtime_days),
        "totalDays": as_number(e.total_days),
        "salary": as_number(e.salary),
    }
    if e.source_invoice is not None:
        out["sourceCompany"] = e.source_company
        out["sourceInvoice"] = e.source_invoice
    return out


def invoice_to_dict(inv: Invoice, *, include_employees: bool = True) -> dict[str, Any]:
    att = inv.attendance
    out: dict[str, Any] = {
        "id": inv.invoice_id,
        "invoiceNumber": inv.invoice_number,
        "companyId": inv.company_id,
        "companyName": inv.company.name,
        "fileName": inv.file.file_name,
        "fileType": inv.file.file_type.value,
        "fileUrl": inv.file.file_url,
        "fileSize": inv.file.file_size,
        "billDetails": bill_details_to_dict(inv.bill_details),
        "attendanceData": {
            "totalEmployees": att.total_employees,
            # Sum of regular days; the name is kept for existing clients.
            "totalPresentDays": as_number(att.total_regular_days),
            "totalOvertimeDays": as_number(att.total_overtime_days),
            "perDayRate": as_number(att.per_day_rate),
            "workingDays": as_number(att.working_days),
        },
        "gstPaidBy": inv.rates.gst_paid_by.value,
        "taxType": inv.rates.tax_type.value,
        "paymentMethod": inv.rates.payment_method.value,
        "serviceChargeRate": as_number(inv.rates.service_charge_rate),
        "bonusRate": as_number(inv.rates.bonus_rate),
        "overtimeRate": as_number(inv.rates.overtime_rate),
        "billTo": {
            "name": inv.bill_to.name,
            "address": inv.bill_to.address,
            "gstNumber": inv.bill_to.gst_number,
            "contactInfo": inv.bill_to.contact_info,
        },
        "status": inv.status.value,
        "paymentStatus": inv.payment_status.value,
        "paymentDate": _iso(inv.payment_date),
        "dueDate": _iso(inv.due_date),
        "notes": inv.notes,
        "isMerged": inv.is_merged,
        "sourceInvoices": list(inv.source_invoice_ids),
        "mergedCompanies": list(inv.merged_company_ids),
        "createdAt": _iso(inv.created_at),
    }
    if include_employees:
        out["processedData"] = {"employees": [employee_to_dict(e) for e in inv.employees]}
    return out


def source_summary(inv: Invoice) -> dict[str, Any]:
    return {
        "id": inv.invoice_id,
        "invoiceNumber": inv.invoice_number,
        "companyName": inv.company.name,
        "totalAmount": as_number(inv.bill_details.total_amount),
    }


def page_to_dict(page: Page, *, key: str = "invoices") -> dict[str, Any]:
    return {
        key: [invoice_to_dict(i, include_employees=False) for i in page.items],
        "pagination": {
            "total": page.total,
            "pages": page.pages,
            "page": page.page,
            "limit": page.limit,
        },
    }


def calculation_to_dict(totals: InvoiceTotals, batch: PayrollBatch) -> dict[str, Any]:
    """Every intermediate figure, for previews and the create response."""
    return {
        "workingDays": as_number(batch.working_days),
        "overtimeThreshold": as_number(batch.overtime_threshold),
        "overtimeDetails": [
            {
                "name": e.name,
                "presentDays": as_number(e.present_days),
                "regularDays": as_number(e.regular_days),
                "overtimeDays": as_number(e.overtime_days),
            }
            for e in batch.employees
            if e.overtime_days > 0
        ],
        "totalRegularDays": as_number(totals.total_regular_days),
        "totalOvertimeDays": as_number(totals.total_overtime_days),
        "baseTotal": as_number(totals.base_total),
        "overtimeAmount": as_number(totals.overtime_amount),
        "statutoryBase": as_number(totals.statutory_base),
        "pf": as_number(totals.pf),
        "esic": as_number(totals.esic),
        "bonus": as_number(totals.bonus),
        "subTotal": as_number(totals.sub_total),
        "roundOffSubTotal": as_number(totals.round_off_sub_total),
        "roundOffDifference": as_number(totals.round_off_difference),
        "serviceCharge": as_number(totals.service_charge),
        "totalBeforeTax": as_number(totals.total_before_tax),
        "cgst": as_number(totals.tax.cgst),
        "sgst": as_number(totals.tax.sgst),
        "igst": as_number(totals.tax.igst),
        "grandTotal": as_number(totals.grand_total),
        "grandTotalInWords": totals.grand_total_in_words,
        "billDetails": bill_details_to_dict(totals.bill_details),
        "employees": [employee_to_dict(e) for e in batch.employees],
    }
