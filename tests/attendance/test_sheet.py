import io

import pandas as pd
import pytest

from src.staffing_billing.staffing_billing.attendance.normalizer import AttendanceNormalizer
from src.staffing_billing.staffing_billing.attendance.sheet import read_attendance_sheet
from src.staffing_billing.staffing_billing.core.exceptions import ValidationError


def test_csv_headers_are_normalized_for_the_normalizer():
    data = b"Name,Present Day,Total Day\nRavi,26,30\nMeena,31,31\n,,\n"

    rows = read_attendance_sheet(data, "march.csv")

    assert rows[0]["name"] == "Ravi"
    assert rows[0]["present_day"] == 26
    assert len(rows) == 2

    records = AttendanceNormalizer().normalize(rows).records
    assert [r.name for r in records] == ["Ravi", "Meena"]


def test_xlsx_blank_cells_become_none():
    buf = io.BytesIO()
    pd.DataFrame({"Name": ["Ravi", "Meena"], "Present Days": [26, None], "Total Days": [30, 30]}).to_excel(
        buf, index=False
    )

    rows = read_attendance_sheet(buf.getvalue(), "march.xlsx")

    assert rows[1]["present_days"] is None
    rec = AttendanceNormalizer().normalize_row(rows[1])
    assert rec.present_days == 0


def test_rejects_empty_and_unsupported_files():
    with pytest.raises(ValidationError):
        read_attendance_sheet(b"", "march.csv")
    with pytest.raises(ValidationError):
        read_attendance_sheet(b"%PDF-1.4", "march.pdf")
