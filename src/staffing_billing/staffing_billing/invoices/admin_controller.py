from __future__ import annotations

import io

from flask import Flask, redirect, request, send_file

from ..common.http import api_view, json_body, ok, query_flag
from ..common.validators import parse_enum
from ..container import Container
from ..core.enums import InvoiceStatus, PaymentStatus
from .controller import created_range, filter_from_args
from .presenter import invoice_to_dict, page_to_dict, source_summary


def register(app: Flask, container: Container) -> None:
    admin = container.merge_service

    @app.route("/api/admin/invoices", methods=["GET"], endpoint="admin_invoices_list")
    @api_view
    def list_all():
        page = admin.list_all(
            filter_from_args(request.args),
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 20),
        )
        return ok(page_to_dict(page))

    @app.route("/api/admin/invoices/merge", methods=["POST"], endpoint="admin_invoices_merge")
    @api_view
    def merge():
        body = json_body()
        result = admin.merge_invoices(body.get("invoiceIds"), notes=body.get("notes"))
        message = "Invoices merged successfully"
        if not result.pdf_generated:
            message += " (PDF generation failed; it can be regenerated from the download endpoint)"
        return ok(
            {
                "mergedInvoice": invoice_to_dict(result.invoice),
                "pdfGenerated": result.pdf_generated,
                "sourceInvoices": [source_summary(s) for s in result.sources],
            },
            message=message,
            status=201,
        )

    @app.route("/api/admin/invoices/merged", methods=["GET"], endpoint="admin_invoices_merged")
    @api_view
    def list_merged():
        status = request.args.get("status")
        payment_status = request.args.get("paymentStatus")
        page = admin.list_merged(
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 20),
            status=parse_enum(InvoiceStatus, status, "status") if status else None,
            payment_status=parse_enum(PaymentStatus, payment_status, "paymentStatus") if payment_status else None,
        )
        return ok(page_to_dict(page))

    @app.route("/api/admin/invoices/merged/<invoice_id>", methods=["GET"], endpoint="admin_invoices_merged_details")
    @api_view
    def merged_details(invoice_id: str):
        details = admin.get_merged_details(invoice_id)
        return ok(
            {
                "mergedInvoice": invoice_to_dict(details.invoice),
                "sourceInvoices": [invoice_to_dict(s, include_employees=False) for s in details.sources],
            }
        )

    @app.route("/api/admin/invoices/merged/<invoice_id>", methods=["DELETE"], endpoint="admin_invoices_merged_delete")
    @api_view
    def delete_merged(invoice_id: str):
        deleted = admin.delete_merged(invoice_id)
        return ok(
            {"id": deleted.invoice_id, "sourceInvoices": list(deleted.source_invoice_ids)},
            message="Merged invoice deleted successfully. Source invoices remain intact.",
        )

    @app.route("/api/admin/invoices/available-for-merge", methods=["GET"], endpoint="admin_invoices_available")
    @api_view
    def available_for_merge():
        created_from, created_to = created_range(request.args)
        page = admin.available_for_merge(
            company_id=request.args.get("companyId"),
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 50),
            created_from=created_from,
            created_to=created_to,
        )
        return ok(page_to_dict(page))

    @app.route("/api/admin/invoices/stats", methods=["GET"], endpoint="admin_invoices_stats")
    @api_view
    def stats():
        return ok(admin.admin_stats())

    @app.route("/api/admin/invoices/<invoice_id>/download", methods=["GET"], endpoint="admin_invoices_download")
    @api_view
    def download(invoice_id: str):
        if query_flag("render"):
            file_name, data = admin.render_pdf(invoice_id)
            return send_file(io.BytesIO(data), mimetype="application/pdf", as_attachment=True, download_name=file_name)
        return redirect(admin.document_url(invoice_id))
