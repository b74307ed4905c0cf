from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import FileType, GstPaidBy, InvoiceStatus, PaymentMethod, PaymentStatus, TaxType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dec, fetchall, fetchone, in_clause
from ..payroll.model import ProcessedEmployee
from .model import (
    AttendanceAggregate,
    BillDetails,
    BillTo,
    CompanyRef,
    Invoice,
    InvoiceFile,
    InvoiceFilter,
    NewInvoice,
    RateConfig,
)
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)

_SELECT_INVOICE = """
    SELECT i.*, c.name AS company_name, c.gst_number AS company_gst_number
    FROM invoices i
    JOIN companies c ON c.company_id = i.company_id
"""


def _where(flt: InvoiceFilter) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []

    if flt.company_id is not None:
        clauses.append("i.company_id=%s")
        params.append(int(flt.company_id))
    if flt.status is not None:
        clauses.append("i.status=%s")
        params.append(flt.status.value)
    if flt.payment_status is not None:
        clauses.append("i.payment_status=%s")
        params.append(flt.payment_status.value)
    if flt.is_merged is not None:
        clauses.append("i.is_merged=%s")
        params.append(1 if flt.is_merged else 0)
    if flt.created_from is not None:
        clauses.append("i.created_at>=%s")
        params.append(flt.created_from)
    if flt.created_to is not None:
        clauses.append("i.created_at<%s")
        params.append(flt.created_to)
    if flt.exclude_cancelled:
        clauses.append("i.status<>%s")
        params.append(InvoiceStatus.CANCELLED.value)

    return " AND ".join(clauses), params


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Writes --------
    def create(self, invoice: NewInvoice) -> Invoice:
        bill = invoice.bill_details
        rates = invoice.rates
        att = invoice.attendance

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoices(
                    invoice_number, company_id,
                    file_name, file_type, file_url, storage_id, file_size,
                    per_day_rate, service_charge_rate, bonus_rate, overtime_rate,
                    gst_paid_by, tax_type, payment_method,
                    base_amount, service_charge, pf_amount, esic_amount,
                    bonus_amount, overtime_amount, gst_amount, total_amount,
                    total_employees, total_regular_days, total_overtime_days, working_days,
                    bill_to_name, bill_to_address, bill_to_gst_number, bill_to_contact_info,
                    status, payment_status, due_date, notes, is_merged
                )
                VALUES(%s,%s, %s,%s,%s,%s,%s, %s,%s,%s,%s, %s,%s,%s,
                       %s,%s,%s,%s, %s,%s,%s,%s, %s,%s,%s,%s, %s,%s,%s,%s, %s,%s,%s,%s,%s)
                """,
                (
                    invoice.invoice_number,
                    int(invoice.company_id),
                    invoice.file.file_name,
                    invoice.file.file_type.value,
                    invoice.file.file_url,
                    invoice.file.storage_id,
                    invoice.file.file_size,
                    att.per_day_rate,
                    rates.service_charge_rate,
                    rates.bonus_rate,
                    rates.overtime_rate,
                    rates.gst_paid_by.value,
                    rates.tax_type.value,
                    rates.payment_method.value,
                    bill.base_amount,
                    bill.service_charge,
                    bill.pf_amount,
                    bill.esic_amount,
                    bill.bonus_amount,
                    bill.overtime_amount,
                    bill.gst_amount,
                    bill.total_amount,
                    int(att.total_employees),
                    att.total_regular_days,
                    att.total_overtime_days,
                    att.working_days,
                    invoice.bill_to.name,
                    invoice.bill_to.address,
                    invoice.bill_to.gst_number,
                    invoice.bill_to.contact_info,
                    invoice.status.value,
                    invoice.payment_status.value,
                    invoice.due_date,
                    invoice.notes,
                    1 if invoice.is_merged else 0,
                ),
            )
            invoice_id = int(cur.lastrowid)

            if invoice.employees:
                cur.executemany(
                    """
                    INSERT INTO invoice_employees(
                        invoice_id, position, name, present_days, regular_days,
                        overtime_days, total_days, salary, source_company, source_invoice
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (
                            invoice_id,
                            pos,
                            e.name,
                            e.present_days,
                            e.regular_days,
                            e.overtime_days,
                            e.total_days,
                            e.salary,
                            e.source_company,
                            e.source_invoice,
                        )
                        for pos, e in enumerate(invoice.employees)
                    ],
                )
            if invoice.source_invoice_ids:
                cur.executemany(
                    "INSERT INTO invoice_sources(merged_invoice_id, source_invoice_id, position) VALUES(%s,%s,%s)",
                    [(invoice_id, int(sid), pos) for pos, sid in enumerate(invoice.source_invoice_ids)],
                )
            if invoice.merged_company_ids:
                cur.executemany(
                    "INSERT INTO invoice_companies(invoice_id, company_id, position) VALUES(%s,%s,%s)",
                    [(invoice_id, int(cid), pos) for pos, cid in enumerate(invoice.merged_company_ids)],
                )

            cur.execute(f"{_SELECT_INVOICE} WHERE i.invoice_id=%s", (invoice_id,))
            created = self._hydrate(cur, fetchall(cur))

        logger.debug("Stored invoice %s as id %s", invoice.invoice_number, invoice_id)
        return created[0]

    def update_fields(
        self,
        *,
        invoice_id: int,
        status: Optional[InvoiceStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        payment_date: Optional[datetime] = None,
        bill_to: Optional[BillTo] = None,
        notes: Optional[str] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []

        if status is not None:
            sets.append("status=%s")
            params.append(status.value)
        if payment_status is not None:
            sets.append("payment_status=%s")
            params.append(payment_status.value)
        if payment_date is not None:
            sets.append("payment_date=%s")
            params.append(payment_date)
        if bill_to is not None:
            sets.extend(["bill_to_name=%s", "bill_to_address=%s", "bill_to_gst_number=%s", "bill_to_contact_info=%s"])
            params.extend([bill_to.name, bill_to.address, bill_to.gst_number, bill_to.contact_info])
        if notes is not None:
            sets.append("notes=%s")
            params.append(notes)

        if not sets:
            return self.get_by_id(invoice_id) is not None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE invoices SET {', '.join(sets)} WHERE invoice_id=%s",
                tuple(params + [int(invoice_id)]),
            )
            return cur.rowcount > 0

    def attach_document(self, *, invoice_id: int, file: InvoiceFile) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE invoices
                SET file_name=%s, file_type=%s, file_url=%s, storage_id=%s, file_size=%s
                WHERE invoice_id=%s
                """,
                (
                    file.file_name,
                    file.file_type.value,
                    file.file_url,
                    file.storage_id,
                    file.file_size,
                    int(invoice_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, invoice_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invoices WHERE invoice_id=%s", (int(invoice_id),))
            return cur.rowcount > 0

    # -------- Reads --------
    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        found = self.get_many([invoice_id])
        return found[0] if found else None

    def get_many(self, invoice_ids: Sequence[int]) -> Sequence[Invoice]:
        """Invoices in the order the ids were given; unknown ids are skipped."""
        ids = [int(i) for i in invoice_ids]
        if not ids:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_INVOICE} WHERE i.invoice_id IN ({in_clause(ids)})", tuple(ids))
            invoices = self._hydrate(cur, fetchall(cur))

        by_id = {inv.invoice_id: inv for inv in invoices}
        return [by_id[i] for i in ids if i in by_id]

    def list(
        self,
        flt: InvoiceFilter,
        *,
        limit: int,
        offset: int = 0,
        newest_first: bool = True,
    ) -> Sequence[Invoice]:
        where, params = _where(flt)
        order = "DESC" if newest_first else "ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT_INVOICE}
                WHERE {where}
                ORDER BY i.created_at {order}, i.invoice_id {order}
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return self._hydrate(cur, fetchall(cur))

    def count(self, flt: InvoiceFilter) -> int:
        where, params = _where(flt)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM invoices i WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    # -------- Mapping --------
    def _hydrate(self, cur, rows: Sequence[Dict[str, Any]]) -> list[Invoice]:
        if not rows:
            return []

        ids = [int(r["invoice_id"]) for r in rows]
        marks = in_clause(ids)

        cur.execute(
            f"""
            SELECT invoice_id, name, present_days, regular_days, overtime_days,
                   total_days, salary, source_company, source_invoice
            FROM invoice_employees
            WHERE invoice_id IN ({marks})
            ORDER BY invoice_id, position
            """,
            tuple(ids),
        )
        employees: dict[int, list[ProcessedEmployee]] = {i: [] for i in ids}
        for e in fetchall(cur):
            employees[int(e["invoice_id"])].append(
                ProcessedEmployee(
                    name=e["name"],
                    present_days=dec(e, "present_days"),
                    regular_days=dec(e, "regular_days"),
                    overtime_days=dec(e, "overtime_days"),
                    total_days=dec(e, "total_days"),
                    salary=dec(e, "salary"),
                    source_company=e.get("source_company"),
                    source_invoice=e.get("source_invoice"),
                )
            )

        cur.execute(
            f"""
            SELECT merged_invoice_id, source_invoice_id
            FROM invoice_sources
            WHERE merged_invoice_id IN ({marks})
            ORDER BY merged_invoice_id, position
            """,
            tuple(ids),
        )
        sources: dict[int, list[int]] = {i: [] for i in ids}
        for s in fetchall(cur):
            sources[int(s["merged_invoice_id"])].append(int(s["source_invoice_id"]))

        cur.execute(
            f"""
            SELECT invoice_id, company_id
            FROM invoice_companies
            WHERE invoice_id IN ({marks})
            ORDER BY invoice_id, position
            """,
            tuple(ids),
        )
        companies: dict[int, list[int]] = {i: [] for i in ids}
        for c in fetchall(cur):
            companies[int(c["invoice_id"])].append(int(c["company_id"]))

        return [
            self._to_invoice(
                r,
                employees[int(r["invoice_id"])],
                sources[int(r["invoice_id"])],
                companies[int(r["invoice_id"])],
            )
            for r in rows
        ]

    @staticmethod
    def _to_invoice(
        r: Dict[str, Any],
        employees: list[ProcessedEmployee],
        source_ids: list[int],
        company_ids: list[int],
    ) -> Invoice:
        return Invoice(
            invoice_id=int(r["invoice_id"]),
            invoice_number=r["invoice_number"],
            company=CompanyRef(
                company_id=int(r["company_id"]),
                name=r.get("company_name") or "",
                gst_number=r.get("company_gst_number"),
            ),
            file=InvoiceFile(
                file_name=r["file_name"],
                file_type=FileType(r.get("file_type") or FileType.PDF.value),
                file_url=r.get("file_url") or "",
                storage_id=r.get("storage_id"),
                file_size=r.get("file_size"),
            ),
            rates=RateConfig(
                per_day_rate=dec(r, "per_day_rate"),
                service_charge_rate=dec(r, "service_charge_rate"),
                bonus_rate=dec(r, "bonus_rate"),
                overtime_rate=dec(r, "overtime_rate"),
                gst_paid_by=GstPaidBy(r["gst_paid_by"]),
                tax_type=TaxType(r["tax_type"]),
                payment_method=PaymentMethod(r["payment_method"]),
            ),
            bill_details=BillDetails(**{name: dec(r, name) for name in BillDetails.field_names()}),
            attendance=AttendanceAggregate(
                total_employees=int(r.get("total_employees") or 0),
                total_regular_days=dec(r, "total_regular_days"),
                total_overtime_days=dec(r, "total_overtime_days"),
                per_day_rate=dec(r, "per_day_rate"),
                working_days=dec(r, "working_days"),
            ),
            employees=employees,
            due_date=r.get("due_date"),
            created_at=r["created_at"],
            bill_to=BillTo(
                name=r.get("bill_to_name") or "",
                address=r.get("bill_to_address") or "",
                gst_number=r.get("bill_to_gst_number") or "",
                contact_info=r.get("bill_to_contact_info") or "",
            ),
            status=InvoiceStatus(r["status"]),
            payment_status=PaymentStatus(r["payment_status"]),
            payment_date=r.get("payment_date"),
            notes=r.get("notes"),
            is_merged=bool(r.get("is_merged")),
            source_invoice_ids=tuple(source_ids),
            merged_company_ids=tuple(company_ids),
        )
