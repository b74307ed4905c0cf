from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

from .model import ProcessedEmployee


def build_salary_register(employees: Sequence[ProcessedEmployee], *, sheet_name: str = "Salary") -> bytes:
    """Excel workbook with one row per payroll line."""
    with_source = any(e.source_invoice for e in employees)

    data = []
    for e in employees:
        row = {
            "Name": e.name,
            "Present Days": float(e.present_days),
            "Regular Days": float(e.regular_days),
            "Overtime Days": float(e.overtime_days),
            "Total Days": float(e.total_days),
            "Net Salary": float(e.salary),
        }
        if with_source:
            row["Company"] = e.source_company or ""
            row["Source Invoice"] = e.source_invoice or ""
        data.append(row)

    columns = ["Name", "Present Days", "Regular Days", "Overtime Days", "Total Days", "Net Salary"]
    if with_source:
        columns += ["Company", "Source Invoice"]
    df = pd.DataFrame(data, columns=columns)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()
