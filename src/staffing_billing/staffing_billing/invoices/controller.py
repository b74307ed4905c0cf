from __future__ import annotations

import io
from datetime import date, datetime
from typing import Any, Mapping, Optional

from flask import Flask, request, send_file

from ..attendance.sheet import read_attendance_sheet
from ..common.datetime_utils import day_range, parse_iso_date
from ..common.http import api_view, json_body, ok, query_flag
from ..common.validators import parse_enum, parse_id
from ..container import Container
from ..core.enums import InvoiceStatus, PaymentStatus
from ..core.exceptions import ValidationError
from .model import InvoiceFilter
from .presenter import calculation_to_dict, invoice_to_dict, page_to_dict

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _date_arg(args: Mapping[str, Any], key: str) -> Optional[date]:
    raw = (args.get(key) or "").strip()
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"Invalid {key}: {raw} (expected YYYY-MM-DD)")


def created_range(args: Mapping[str, Any]) -> tuple[Optional[datetime], Optional[datetime]]:
    return day_range(_date_arg(args, "startDate"), _date_arg(args, "endDate"))


def filter_from_args(args: Mapping[str, Any]) -> InvoiceFilter:
    """Query-string filters; ``endDate`` is inclusive."""
    status = args.get("status")
    payment_status = args.get("paymentStatus")
    company_id = args.get("companyId")
    created_from, created_to = created_range(args)
    return InvoiceFilter(
        company_id=parse_id(company_id, "company ID") if company_id else None,
        status=parse_enum(InvoiceStatus, status, "status") if status else None,
        payment_status=parse_enum(PaymentStatus, payment_status, "paymentStatus") if payment_status else None,
        is_merged=query_flag("isMerged"),
        created_from=created_from,
        created_to=created_to,
    )


def register(app: Flask, container: Container) -> None:
    invoices = container.invoice_service

    @app.route("/api/invoices/create", methods=["POST"], endpoint="invoices_create")
    @api_view
    def create_invoice():
        body = json_body()
        created = invoices.create_invoice(
            company_id=body.get("companyId"),
            attendance_rows=body.get("employees", body.get("attendanceData")),
            rates=body,
            file_name=body.get("fileName"),
            file_url=body.get("fileUrl"),
            bill_to=body.get("billTo"),
            notes=body.get("notes"),
        )
        return ok(
            {
                "invoice": invoice_to_dict(created.invoice),
                "calculations": calculation_to_dict(created.calculation.totals, created.calculation.batch),
                "droppedRows": created.calculation.dropped,
            },
            message="Invoice created successfully",
            status=201,
        )

    @app.route("/api/invoices/preview", methods=["POST"], endpoint="invoices_preview")
    @api_view
    def preview_invoice():
        body = json_body()
        calc = invoices.preview_totals(body.get("employees", body.get("attendanceData")), body)
        data = calculation_to_dict(calc.totals, calc.batch)
        data["droppedRows"] = calc.dropped
        return ok(data)

    @app.route("/api/invoices/attendance/preview", methods=["POST"], endpoint="invoices_attendance_preview")
    @api_view
    def preview_attendance_sheet():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("No file uploaded")
        rows = read_attendance_sheet(upload.read(), upload.filename)
        calc = invoices.preview_totals(rows, request.form.to_dict())
        data = calculation_to_dict(calc.totals, calc.batch)
        data["droppedRows"] = calc.dropped
        return ok(data)

    @app.route("/api/invoices", methods=["GET"], endpoint="invoices_list")
    @api_view
    def list_invoices():
        page = invoices.list_invoices(
            filter_from_args(request.args),
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 20),
        )
        return ok(page_to_dict(page))

    @app.route("/api/invoices/company/<company_id>", methods=["GET"], endpoint="invoices_by_company")
    @api_view
    def list_company_invoices(company_id: str):
        status = request.args.get("status")
        page = invoices.list_company_invoices(
            company_id,
            status=parse_enum(InvoiceStatus, status, "status") if status else None,
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 20),
        )
        return ok(page_to_dict(page))

    @app.route("/api/invoices/stats/<company_id>", methods=["GET"], endpoint="invoices_company_stats")
    @api_view
    def company_stats(company_id: str):
        return ok(invoices.company_stats(company_id))

    @app.route("/api/invoices/<invoice_id>", methods=["GET"], endpoint="invoices_get")
    @api_view
    def get_invoice(invoice_id: str):
        return ok(invoice_to_dict(invoices.get_invoice(invoice_id)))

    @app.route("/api/invoices/<invoice_id>", methods=["PUT"], endpoint="invoices_update")
    @api_view
    def update_invoice(invoice_id: str):
        body = json_body()
        updated = invoices.update_invoice(
            invoice_id,
            status=body.get("status"),
            payment_status=body.get("paymentStatus"),
            bill_to=body.get("billTo"),
            notes=body.get("notes"),
        )
        return ok(invoice_to_dict(updated), message="Invoice updated successfully")

    @app.route("/api/invoices/<invoice_id>", methods=["DELETE"], endpoint="invoices_delete")
    @api_view
    def delete_invoice(invoice_id: str):
        deleted = invoices.delete_invoice(invoice_id)
        return ok({"id": deleted.invoice_id}, message="Invoice deleted successfully")

    @app.route("/api/invoices/<invoice_id>/salary-register.xlsx", methods=["GET"], endpoint="invoices_salary_register")
    @api_view
    def salary_register(invoice_id: str):
        file_name, data = invoices.salary_register(invoice_id)
        return send_file(io.BytesIO(data), mimetype=XLSX_MIMETYPE, as_attachment=True, download_name=file_name)
