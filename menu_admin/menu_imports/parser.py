"""
CSV parsing for the bulk menu upload.

The whole file is parsed before anything is written: a structural problem
anywhere in the file rejects the batch, so operators fix and re-upload it in full.
"""
import csv
import io
import logging
from typing import Optional

from menu_admin.menu_imports.exceptions import BatchRejectedError
from menu_admin.menu_imports.schemas import ImportRow

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Restaurant Name", "Name", "Price")
OPTIONAL_COLUMNS = ("Category", "Description", "Veg", "Vegan", "Prep Time", "Available", "Image URL")
TEMPLATE_COLUMNS = REQUIRED_COLUMNS + OPTIONAL_COLUMNS
TEMPLATE_SAMPLE_ROW = ("Burger King", "Whopper", "250", "Burgers", "Flame grilled patty", "No", "No", "15", "Yes", "")
TEMPLATE_FILENAME = "menu_bulk_upload_template.csv"

COLUMN_FIELDS = {
    "Restaurant Name": "restaurant_name",
    "Name": "item_name",
    "Price": "price",
    "Category": "category_name",
    "Description": "description",
    "Veg": "is_vegetarian",
    "Vegan": "is_vegan",
    "Prep Time": "preparation_time",
    "Available": "is_available",
    "Image URL": "image_url",
}

_EXTRA_CELLS = "__extra_cells__"


def parse_menu_csv(content: bytes) -> list[ImportRow]:
    """
    Parses an uploaded CSV (header row required) into ImportRows.

    Args:
        content: Raw file bytes (UTF-8, BOM tolerated)

    Returns:
        Rows in file order

    Raises:
        BatchRejectedError: Undecodable file, a row with the wrong number of
            cells, no data rows, or mandatory columns missing in the first record
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise BatchRejectedError("File Error: file is not valid UTF-8 text") from e

    reader = csv.DictReader(io.StringIO(text, newline=""), restkey=_EXTRA_CELLS, strict=True)
    if reader.fieldnames is None:
        raise BatchRejectedError("CSV Parsing Error: file is empty")
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    records: list[dict[str, Optional[str]]] = []
    try:
        for record in reader:
            _ensure_row_shape(record, reader.line_num)
            records.append(record)
    except csv.Error as e:
        raise BatchRejectedError(f"CSV Parsing Error: {e} (line {reader.line_num})") from e

    if not records:
        raise BatchRejectedError("CSV Parsing Error: file contains no menu rows")

    first = records[0]
    if any(not (first.get(column) or "").strip() for column in REQUIRED_COLUMNS):
        raise BatchRejectedError(f"Missing required columns: {', '.join(REQUIRED_COLUMNS)}")

    rows = [_to_import_row(record, index) for index, record in enumerate(records, start=1)]
    logger.info(f"Parsed menu upload: {len(rows)} rows, columns={reader.fieldnames}")
    return rows


def _ensure_row_shape(record: dict, line_num: int) -> None:
    if _EXTRA_CELLS in record:
        raise BatchRejectedError(f"CSV Parsing Error: Too many fields (line {line_num})")
    if any(value is None for value in record.values()):
        raise BatchRejectedError(f"CSV Parsing Error: Too few fields (line {line_num})")


def _to_import_row(record: dict[str, Optional[str]], line_number: int) -> ImportRow:
    values = {
        field: record[column]
        for column, field in COLUMN_FIELDS.items()
        if record.get(column)
    }
    return ImportRow(line_number=line_number, **values)


def build_template_csv() -> str:
    """CSV template offered to operators: the header plus one sample row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TEMPLATE_COLUMNS)
    writer.writerow(TEMPLATE_SAMPLE_ROW)
    return buffer.getvalue()
