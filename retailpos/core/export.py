"""
CSV export helpers.
"""
import csv
import io
from datetime import datetime
from typing import Any, Iterable, Sequence

from fastapi import Response


def build_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return output.getvalue()


def csv_response(filename_prefix: str, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> Response:
    filename = f"{filename_prefix}-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
    return Response(
        content=build_csv(headers, rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
