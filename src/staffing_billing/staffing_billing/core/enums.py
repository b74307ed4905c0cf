from __future__ import annotations

from enum import Enum


class TaxType(str, Enum):
    """Intra-state (CGST+SGST) or inter-state (IGST) tax."""

    GST = "gst"
    IGST = "igst"


class GstPaidBy(str, Enum):
    """Who remits GST; the principal employer means reverse charge."""

    PRINCIPAL_EMPLOYER = "principal-employer"
    ASHAPURI = "ashapuri"


class PaymentMethod(str, Enum):
    PAID_BY_US = "paid-by-us"
    PAID_BY_PRINCIPAL = "paid-by-principal"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    FAILED = "failed"


class FileType(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    IMAGE = "image"
    UNKNOWN = "unknown"

    @classmethod
    def from_filename(cls, file_name: str) -> "FileType":
        extension = (file_name or "").lower().rsplit(".", 1)[-1]
        if extension == "pdf":
            return cls.PDF
        if extension in {"xlsx", "xls"}:
            return cls.EXCEL
        if extension in {"jpg", "jpeg", "png"}:
            return cls.IMAGE
        return cls.UNKNOWN
