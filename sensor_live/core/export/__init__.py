from .serializer import (
    CSV_HEADER,
    STATUS_MISSING,
    STATUS_REAL,
    ExportRow,
    rows_from_snapshot,
    rows_from_store,
    to_csv,
)

__all__ = [
    "CSV_HEADER",
    "STATUS_MISSING",
    "STATUS_REAL",
    "ExportRow",
    "rows_from_snapshot",
    "rows_from_store",
    "to_csv",
]
