from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, Iterable

from ..common.money import ZERO, as_number
from ..core.enums import InvoiceStatus, PaymentStatus
from .model import Invoice
from .presenter import bill_details_to_dict

TOP_COMPANIES = 10
RECENT_MERGED = 5


def company_stats(invoices: Iterable[Invoice]) -> dict[str, Any]:
    total_invoices = 0
    total_amount = ZERO
    paid_amount = ZERO
    pending_amount = ZERO
    draft_count = sent_count = paid_count = 0

    for inv in invoices:
        amount = inv.bill_details.total_amount
        total_invoices += 1
        total_amount += amount
        if inv.payment_status == PaymentStatus.PAID:
            paid_amount += amount
            paid_count += 1
        elif inv.payment_status == PaymentStatus.PENDING:
            pending_amount += amount
        if inv.status == InvoiceStatus.DRAFT:
            draft_count += 1
        elif inv.status == InvoiceStatus.SENT:
            sent_count += 1

    return {
        "totalInvoices": total_invoices,
        "totalAmount": as_number(total_amount),
        "paidAmount": as_number(paid_amount),
        "pendingAmount": as_number(pending_amount),
        "draftCount": draft_count,
        "sentCount": sent_count,
        "paidCount": paid_count,
    }


def _grouped(buckets: dict[Any, list]) -> list[dict[str, Any]]:
    return [{"_id": key, "count": n, "amount": as_number(amount)} for key, (n, amount) in buckets.items()]


def admin_stats(invoices: Iterable[Invoice]) -> dict[str, Any]:
    """Overall totals, per-status and per-company breakdowns, recent merges.

    Expects invoices newest first; ``recentMerged`` keeps that order.
    """
    total_invoices = merged_count = 0
    total_amount = ZERO
    by_status: dict[str, list] = defaultdict(lambda: [0, ZERO])
    by_payment: dict[str, list] = defaultdict(lambda: [0, ZERO])
    by_company: dict[int, list] = defaultdict(lambda: [0, ZERO])
    company_names: dict[int, str] = {}
    recent_merged: list[dict[str, Any]] = []

    for inv in invoices:
        amount: Decimal = inv.bill_details.total_amount
        total_invoices += 1
        total_amount += amount

        for bucket, key in (
            (by_status, inv.status.value),
            (by_payment, inv.payment_status.value),
            (by_company, inv.company_id),
        ):
            bucket[key][0] += 1
            bucket[key][1] += amount
        company_names.setdefault(inv.company_id, inv.company.name)

        if inv.is_merged:
            merged_count += 1
            if len(recent_merged) < RECENT_MERGED:
                recent_merged.append(
                    {
                        "id": inv.invoice_id,
                        "invoiceNumber": inv.invoice_number,
                        "billDetails": bill_details_to_dict(inv.bill_details),
                        "createdAt": inv.created_at.isoformat(),
                        "sourceInvoices": list(inv.source_invoice_ids),
                    }
                )

    top_companies = sorted(by_company.items(), key=lambda kv: kv[1][1], reverse=True)[:TOP_COMPANIES]

    return {
        "overall": {
            "totalInvoices": total_invoices,
            "totalAmount": as_number(total_amount),
            "mergedCount": merged_count,
            "regularCount": total_invoices - merged_count,
        },
        "byStatus": _grouped(by_status),
        "byPaymentStatus": _grouped(by_payment),
        "byCompany": [
            {
                "company": company_names.get(cid) or "Unknown",
                "companyId": cid,
                "count": n,
                "amount": as_number(amount),
            }
            for cid, (n, amount) in top_companies
        ],
        "recentMerged": recent_merged,
    }
