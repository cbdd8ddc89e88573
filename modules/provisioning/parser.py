"""
Import file parsing.

Reads delimited text (comma, semicolon, tab or pipe) and .xlsx
spreadsheets into ImportRecords. Header matching is tolerant of case,
spacing, punctuation and the Portuguese labels admins commonly use.
Rows without an email or a name are dropped.
"""

import csv
import io
import logging
import re
import unicodedata
from typing import Any, Iterable, Optional

from openpyxl import load_workbook

from modules.access.models import PlanType, RoleName

from .exceptions import ImportFileError
from .models import ImportRecord

logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm")
DELIMITERS = ",;\t|"

# Normalized header -> field
COLUMN_ALIASES = {
    "email": "email",
    "emailaddress": "email",
    "mail": "email",
    "name": "full_name",
    "fullname": "full_name",
    "nome": "full_name",
    "nomecompleto": "full_name",
    "role": "role",
    "funcao": "role",
    "papel": "role",
    "plan": "plan_type",
    "plantype": "plan_type",
    "plano": "plan_type",
}

ROLE_ALIASES = {
    "admin": RoleName.ADMIN,
    "administrator": RoleName.ADMIN,
    "administrador": RoleName.ADMIN,
}

PLAN_ALIASES = {
    "premium": PlanType.PREMIUM,
    "pro": PlanType.PRO,
    "free": PlanType.FREE,
    "gratuito": PlanType.FREE,
}


def normalize_header(header: Any) -> str:
    """Lower-case, strip accents and drop everything but letters and digits."""
    text = unicodedata.normalize("NFKD", str(header or ""))
    text = "".join(c for c in text if not unicodedata.combining(c))
    return re.sub(r"[^a-z0-9]", "", text.lower())


def match_column(header: Any) -> Optional[str]:
    """Map a raw header to an ImportRecord field, or None if unrecognized."""
    key = normalize_header(header)
    if not key:
        return None
    if key in COLUMN_ALIASES:
        return COLUMN_ALIASES[key]
    # "user email", "e-mail do cliente"
    if "email" in key:
        return "email"
    if key.endswith("name") or key.startswith("nome"):
        return "full_name"
    return None


def _parse_role(value: Any) -> RoleName:
    return ROLE_ALIASES.get(normalize_header(value), RoleName.USER)


def _parse_plan(value: Any) -> PlanType:
    return PLAN_ALIASES.get(normalize_header(value), PlanType.FREE)


def _cell(value: Any) -> str:
    return "" if value is None else str(value).strip()


def rows_to_records(rows: Iterable[Iterable[Any]]) -> list[ImportRecord]:
    """
    Convert a header row plus data rows into ImportRecords.

    The first row naming at least one known column is the header.
    """
    iterator = iter(rows)
    columns: dict[int, str] = {}
    for header in iterator:
        columns = {}
        for index, raw in enumerate(header):
            field = match_column(raw)
            if field and field not in columns.values():
                columns[index] = field
        if columns:
            break

    if "email" not in columns.values() or "full_name" not in columns.values():
        raise ImportFileError("upload", "header must name an email and a name column")

    records: list[ImportRecord] = []
    dropped = 0
    for row in iterator:
        values: dict[str, str] = {}
        for index, raw in enumerate(row):
            field = columns.get(index)
            if field:
                values[field] = _cell(raw)

        if not values.get("email") or not values.get("full_name"):
            dropped += 1
            continue

        records.append(ImportRecord(
            email=values["email"],
            full_name=values["full_name"],
            role=_parse_role(values.get("role")),
            plan_type=_parse_plan(values.get("plan_type")),
        ))

    if dropped:
        logger.info(f"Dropped {dropped} import rows without email or name")
    return records


def _read_delimited(content: bytes, filename: str) -> list[list[str]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")

    sample = text[:4096]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=DELIMITERS)
    except csv.Error:
        dialect = csv.excel

    return [row for row in csv.reader(io.StringIO(text), dialect) if any(c.strip() for c in row)]


def _read_spreadsheet(content: bytes, filename: str) -> list[tuple]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ImportFileError(filename, f"not a readable spreadsheet ({e})") from e
    try:
        sheet = workbook.active
        return [row for row in sheet.iter_rows(values_only=True) if any(c is not None for c in row)]
    finally:
        workbook.close()


def parse_import_file(content: bytes, filename: str) -> list[ImportRecord]:
    """
    Parse an uploaded import file.

    Args:
        content: Raw file bytes
        filename: Original file name; the extension selects the reader

    Returns:
        Records in file order, duplicates included

    Raises:
        ImportFileError: If the file is empty, unreadable or lacks the
            email/name columns
    """
    if not content:
        raise ImportFileError(filename, "file is empty")

    if filename.lower().endswith(SPREADSHEET_EXTENSIONS):
        rows: list = _read_spreadsheet(content, filename)
    else:
        rows = _read_delimited(content, filename)

    if not rows:
        raise ImportFileError(filename, "file has no rows")

    try:
        return rows_to_records(rows)
    except ImportFileError as e:
        raise ImportFileError(filename, e.details["reason"]) from e
