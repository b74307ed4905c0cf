"""Spreadsheet import for manually prepared attendance sheets."""

from __future__ import annotations

import io
import re

import pandas as pd

from ..core.enums import FileType
from ..core.exceptions import ValidationError


def _column_key(column: object) -> str:
    key = re.sub(r"\s+", "_", str(column).strip().lower())
    return key


def read_attendance_sheet(data: bytes, file_name: str) -> list[dict]:
    """Read a CSV/XLSX attendance sheet into raw rows for the normalizer.

    Column names are lower-cased with spaces replaced by underscores, so a
    "Present Day" header becomes ``present_day``. Blank cells become None.
    """
    if not data:
        raise ValidationError("No file uploaded")

    buffer = io.BytesIO(data)
    file_type = FileType.from_filename(file_name)
    try:
        if file_type == FileType.EXCEL:
            df = pd.read_excel(buffer, sheet_name=0)
        elif (file_name or "").lower().endswith(".csv"):
            df = pd.read_csv(buffer)
        else:
            raise ValidationError("Invalid file type. Only CSV and Excel sheets are allowed.")
    except ValidationError:
        raise
    except Exception as e:
        raise ValidationError(f"Could not read attendance sheet: {e}")

    df = df.rename(columns=_column_key).dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")
