from __future__ import annotations

import csv
import io
from typing import Any, Dict, Optional

from flask import Flask, request

from ..analytics.exports import CsvTable
from ..core.exceptions import ValidationError


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", {"body": "invalid_json"})
    return data


def csv_response(app: Flask, table: CsvTable):
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(table.fieldnames))
    writer.writeheader()
    for row in table.rows:
        writer.writerow(row)

    # BOM so spreadsheet apps pick up UTF-8
    csv_bytes = out.getvalue().encode("utf-8-sig")
    return app.response_class(
        csv_bytes,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={table.filename}"},
    )


def optional_int_arg(name: str) -> Optional[int]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number", {name: "invalid_number"}) from None


def bool_arg(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}
