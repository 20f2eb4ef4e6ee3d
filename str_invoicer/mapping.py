from typing import Dict, Iterable, List, Sequence, Tuple

from .models import FieldMapping, RawRow

# Canonical field → ordered keyword substrings matched against lowercased headers
OTA_FIELD_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "reservation_id": ("reference", "booking", "id"),
    "check_in_date": ("check-in", "check in", "start"),
    "check_out_date": ("checkout", "check out", "end"),
    "net_payout": ("net", "payout"),
    "payout_date": ("payout date", "paid on"),
    "guest_name": ("guest", "name"),
    "gross_amount": ("amount", "gross", "total"),
    "ota_fees": ("commission", "fee", "charge"),
}

GL_FIELD_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "date": ("date",),
    "account_name": ("account", "code"),
    "description": ("description", "detail"),
    "contact": ("contact", "payee", "payer"),
    "debit_amount": ("debit", "expense", "out", "amount"),
    "credit_amount": ("credit", "income", "in", "amount"),
    "source_type": ("source",),
}

REQUIRED_OTA_FIELDS: Tuple[str, ...] = (
    "reservation_id",
    "check_in_date",
    "net_payout",
    "payout_date",
    "guest_name",
    "gross_amount",
)

REQUIRED_GL_FIELDS: Tuple[str, ...] = (
    "date",
    "account_name",
    "description",
    "contact",
    "debit_amount",
    "credit_amount",
)


def headers_from_rows(rows: Sequence[RawRow]) -> List[str]:
    """Headers of a sheet, taken from its first row."""
    if not rows:
        return []
    return [str(h) for h in rows[0].keys()]


def find_header(headers: Iterable[str], keywords: Iterable[str]) -> str:
    """First header (in header order) containing any keyword, or "" if none does."""
    lowered = [k.lower() for k in keywords]
    for header in headers:
        text = str(header).lower()
        if any(k in text for k in lowered):
            return header
    return ""


def infer_mapping(ota_headers: Sequence[str], gl_headers: Sequence[str]) -> FieldMapping:
    """
    Suggest a column mapping from raw headers.
    Deterministic first-match keyword scan; the caller confirms the result.
    """
    return FieldMapping(
        ota={field: find_header(ota_headers, kws) for field, kws in OTA_FIELD_KEYWORDS.items()},
        gl={field: find_header(gl_headers, kws) for field, kws in GL_FIELD_KEYWORDS.items()},
    )


def infer_mapping_from_rows(ota_rows: Sequence[RawRow], gl_rows: Sequence[RawRow]) -> FieldMapping:
    return infer_mapping(headers_from_rows(ota_rows), headers_from_rows(gl_rows))


def missing_required_fields(mapping: FieldMapping) -> Dict[str, List[str]]:
    return {
        "ota": [f for f in REQUIRED_OTA_FIELDS if not mapping.ota.get(f)],
        "gl": [f for f in REQUIRED_GL_FIELDS if not mapping.gl.get(f)],
    }


def validate_mapping(mapping: FieldMapping) -> None:
    if mapping is None:
        raise ValueError("Mapping is None")
    missing = missing_required_fields(mapping)
    if missing["ota"] or missing["gl"]:
        parts = [f"{source}: {', '.join(fields)}" for source, fields in missing.items() if fields]
        raise ValueError(f"Required fields are not mapped ({'; '.join(parts)})")
