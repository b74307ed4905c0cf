from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .companies.mysql_company_repository import MySQLCompanyRepository
from .core.constants import DEFAULT_INVOICE_DUE_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .documents.pdf_renderer import InvoicePdfRenderer
from .documents.publisher import InvoiceDocumentPublisher
from .documents.storage import LocalDocumentStorage
from .invoices.merge_service import InvoiceMergeService
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository
from .invoices.mysql_sequence_repository import MySQLSequenceRepository
from .invoices.numbering import InvoiceNumberGenerator
from .invoices.service import InvoiceService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    invoices_repo: MySQLInvoiceRepository
    companies_repo: MySQLCompanyRepository
    sequences_repo: MySQLSequenceRepository

    storage: LocalDocumentStorage
    documents: InvoiceDocumentPublisher
    invoice_service: InvoiceService
    merge_service: InvoiceMergeService


def build_container(*, db_config: Mapping[str, Any], settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    invoices_repo = MySQLInvoiceRepository(conn)
    companies_repo = MySQLCompanyRepository(conn)
    sequences_repo = MySQLSequenceRepository(conn)

    due_days = int(getattr(settings, "INVOICE_DUE_DAYS", DEFAULT_INVOICE_DUE_DAYS))
    storage = LocalDocumentStorage(
        getattr(settings, "DOCUMENT_ROOT", "uploads"),
        base_url=getattr(settings, "DOCUMENT_BASE_URL", "/uploads"),
    )
    documents = InvoiceDocumentPublisher(
        InvoicePdfRenderer(
            business_name=getattr(settings, "BUSINESS_NAME", "ASHAPURI SECURITY SERVICES"),
            tagline=getattr(settings, "BUSINESS_TAGLINE", "Security & Manpower Solutions"),
        ),
        storage,
    )
    numbers = InvoiceNumberGenerator(sequences_repo)

    invoice_service = InvoiceService(
        invoices_repo,
        companies_repo,
        numbers,
        due_days=due_days,
        documents=documents,
    )
    merge_service = InvoiceMergeService(
        invoices_repo,
        numbers,
        invoice_service,
        documents=documents,
        due_days=due_days,
    )

    return Container(
        conn=conn,
        invoices_repo=invoices_repo,
        companies_repo=companies_repo,
        sequences_repo=sequences_repo,
        storage=storage,
        documents=documents,
        invoice_service=invoice_service,
        merge_service=merge_service,
    )
