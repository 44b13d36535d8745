"""CSV parsing and row mapping utilities for contact import."""

import csv
import io
from collections.abc import Mapping, Sequence

from jobdock.imports.exceptions import CSVParseError
from jobdock.imports.schemas import CSVPreview

# Number of data rows returned by a preview
PREVIEW_ROW_LIMIT = 5

# Canonical contact field -> header aliases (case-insensitive).
# Order matters: the first field whose aliases match a header wins.
DEFAULT_FIELD_ALIASES: dict[str, list[str]] = {
    "full_name": [
        "full name",
        "fullname",
        "name",
        "client name",
        "client",
        "contact name",
        "customer name",
        "customer",
    ],
    "first_name": [
        "first name",
        "firstname",
        "first",
        "given name",
        "fname",
    ],
    "last_name": [
        "last name",
        "lastname",
        "last",
        "surname",
        "family name",
        "lname",
    ],
    "email": [
        "email",
        "email address",
        "e-mail",
        "e-mail address",
        "mail",
    ],
    "phone": [
        "phone",
        "phone number",
        "telephone",
        "tel",
        "mobile",
        "cell",
    ],
    "company": [
        "company",
        "company name",
        "organization",
        "organisation",
        "business",
    ],
    "job_title": [
        "job title",
        "title",
        "position",
        "role",
    ],
    "address": [
        "address",
        "street",
        "street address",
        "address line 1",
    ],
    "city": [
        "city",
        "town",
    ],
    "state": [
        "state",
        "province",
        "region",
    ],
    "zip_code": [
        "zip",
        "zip code",
        "zipcode",
        "postal code",
        "postcode",
    ],
    "country": [
        "country",
    ],
    "tags": [
        "tags",
        "tag",
        "labels",
    ],
    "notes": [
        "notes",
        "note",
        "comments",
        "comment",
        "description",
    ],
    "status": [
        "status",
    ],
}


def build_alias_table(
    extra_aliases: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, list[str]]:
    """Merge deployment-specific aliases into the default alias table.

    Extra aliases for a known field are appended after its defaults; unknown
    fields are appended at the end of the iteration order.

    Args:
        extra_aliases: Map of canonical field -> additional aliases.

    Returns:
        dict[str, list[str]]: New alias table (defaults are not modified).
    """
    table = {field: list(aliases) for field, aliases in DEFAULT_FIELD_ALIASES.items()}
    for field, aliases in (extra_aliases or {}).items():
        known = table.setdefault(field, [])
        for alias in aliases:
            alias_lower = alias.lower().strip()
            if alias_lower and alias_lower not in known:
                known.append(alias_lower)
    return table


def normalize_header(header: str) -> str:
    return header.lower().strip()


def infer_mapping(
    headers: Sequence[str],
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, str]:
    """Suggest a header -> contact field mapping from CSV headers.

    Args:
        headers: Column headers from the file.
        aliases: Alias table to use (defaults to DEFAULT_FIELD_ALIASES).

    Returns:
        dict[str, str]: Mapping for recognized headers; unrecognized ones are
            left out.
    """
    table = DEFAULT_FIELD_ALIASES if aliases is None else aliases
    mapping = {}

    for header in headers:
        normalized = normalize_header(header)
        for field, field_aliases in table.items():
            if normalized == field or normalized in field_aliases:
                mapping[header] = field
                break

    return mapping


def parse_csv_rows(csv_content: str) -> tuple[list[str], list[dict[str, str]]]:
    """Parse CSV text into trimmed headers and row dictionaries.

    The first non-empty line is the header row. Blank lines are skipped.
    Parsing is strict: bad quoting or a row whose field count differs from
    the header count is an error.

    Args:
        csv_content: Raw CSV text.

    Returns:
        tuple: (list of headers, list of header -> value dicts).

    Raises:
        CSVParseError: If the CSV is malformed or has no header row.
    """
    content = csv_content.lstrip("\ufeff")  # Handle BOM
    reader = csv.reader(io.StringIO(content, newline=""), strict=True)

    headers: list[str] = []
    rows: list[dict[str, str]] = []
    try:
        for record in reader:
            if not record:
                continue
            if not headers:
                headers = _dedupe_headers([h.strip() for h in record])
                continue
            if len(record) != len(headers):
                qualifier = "few" if len(record) < len(headers) else "many"
                raise CSVParseError(
                    f"CSV parsing error: Too {qualifier} fields: expected "
                    f"{len(headers)} fields but parsed {len(record)} "
                    f"(line {reader.line_num})"
                )
            rows.append(dict(zip(headers, record)))
    except csv.Error as e:
        raise CSVParseError(f"CSV parsing error: {e} (line {reader.line_num})") from e

    if not headers:
        raise CSVParseError("CSV parsing error: no header row found")

    return headers, rows


def _dedupe_headers(headers: list[str]) -> list[str]:
    """Suffix repeated header names so no column is silently dropped."""
    seen: dict[str, int] = {}
    result = []
    for header in headers:
        if header in seen:
            seen[header] += 1
            result.append(f"{header}_{seen[header]}")
        else:
            seen[header] = 0
            result.append(header)
    return result


def parse_preview(
    csv_content: str,
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> CSVPreview:
    """Parse CSV text and build a preview for mapping confirmation.

    Args:
        csv_content: Raw CSV text.
        aliases: Alias table used to suggest the mapping.

    Returns:
        CSVPreview: Headers, first rows, row count and suggested mapping.

    Raises:
        CSVParseError: If the CSV is malformed.
    """
    headers, rows = parse_csv_rows(csv_content)
    return CSVPreview(
        headers=headers,
        rows=rows[:PREVIEW_ROW_LIMIT],
        total_rows=len(rows),
        suggested_mapping=infer_mapping(headers, aliases),
    )


def parse_tags(tags_string: str | None) -> list[str]:
    """Parse a comma-separated tags string.

    Order and duplicates are kept as in the source.
    Example: "vip, residential,,vip" -> ["vip", "residential", "vip"]

    Args:
        tags_string: String containing comma-separated tags.

    Returns:
        list[str]: List of cleaned tag names.
    """
    if not tags_string:
        return []
    return [tag.strip() for tag in tags_string.split(",") if tag.strip()]


def _apply_full_name(record: dict, value: str) -> None:
    """Split a full name into first/last name without overwriting either.

    A single-word name fills both fields.
    """
    tokens = value.split()
    if not tokens:
        return
    first = tokens[0]
    last = " ".join(tokens[1:]) or first
    record.setdefault("first_name", first)
    record.setdefault("last_name", last)


def _is_name_header(header: str) -> bool:
    normalized = normalize_header(header)
    return header == "Client Name" or "name" in normalized or "client" in normalized


def normalize_row(row: Mapping[str, str | None], mapping: Mapping[str, str]) -> dict:
    """Build a partial contact record from one parsed CSV row.

    Steps:
    1. Copy every mapped, non-empty value (trimmed).
    2. Split a mapped full name into first/last name.
    3. Fill still-missing first/last name from any name-like column
       (header containing "name" or "client"), mapped or not.
    4. Split tags on commas.
    5. Fall back to literal "Contact"/"Address" columns for phone/address.

    Never raises; required fields are checked by the caller.

    Args:
        row: Parsed row (header -> raw value).
        mapping: Confirmed header -> contact field mapping.

    Returns:
        dict: Partial contact record.
    """
    record: dict = {}

    for header, field in mapping.items():
        value = row.get(header)
        if value is None:
            continue
        value = str(value).strip()
        if value and field not in record:
            record[field] = value

    full_name = record.pop("full_name", None)
    if full_name:
        _apply_full_name(record, full_name)

    if not record.get("first_name") or not record.get("last_name"):
        for header, value in row.items():
            if "first_name" in record and "last_name" in record:
                break
            if value and str(value).strip() and _is_name_header(header):
                _apply_full_name(record, str(value).strip())

    if isinstance(record.get("tags"), str):
        record["tags"] = parse_tags(record["tags"])

    for field, literal_header in (("phone", "Contact"), ("address", "Address")):
        if field not in record:
            value = row.get(literal_header)
            if value and str(value).strip():
                record[field] = str(value).strip()

    return record
