from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..invoices.model import BillTo, CompanyRef


@dataclass(frozen=True)
class Company:
    company_id: int
    name: str
    address: str = ""
    gst_number: Optional[str] = None
    contact_info: str = ""

    def ref(self) -> CompanyRef:
        return CompanyRef(company_id=self.company_id, name=self.name, gst_number=self.gst_number)

    def bill_to(self) -> BillTo:
        """Default bill-to block for a new invoice."""
        return BillTo(
            name=self.name,
            address=self.address or "",
            gst_number=self.gst_number or "",
            contact_info=self.contact_info or "",
        )
