# Excel extractor: openpyxl for .xlsx, xlrd for legacy .xls.
#
# Output layout, one block per sheet in workbook order:
#
#   --- Sheet: <name> ---
#   <cell>\t<cell>\t...      (one line per non-empty row)
#   <blank line>
#
# Cached cell values are used, not formulas.  Trailing empty cells are
# dropped, inner empty cells become empty strings, and rows with no values
# are skipped.

import io
from datetime import datetime

import openpyxl
import xlrd

import services.logger as log
from services.message import FileHandle
from services.probe import probe_binary
from extractors import BaseExtractor
from extractors.registry import FileCategory, register

l = log.get_logger()


def format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime) and value.time() == datetime.min.time():
        return value.date().isoformat()
    return str(value)


def format_row(values) -> str | None:
    """Tab-join a row, or return None when the row has no values."""
    cells = [format_cell(v) for v in values]
    while cells and cells[-1] == "":
        cells.pop()
    if not cells:
        return None
    return "\t".join(cells)


def _xlsx_sheets(data: bytes):
    wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        for ws in wb.worksheets:
            yield ws.title, [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _xls_sheets(data: bytes):
    book = xlrd.open_workbook(file_contents=data)
    for sheet in book.sheets():
        rows = []
        for r in range(sheet.nrows):
            row = []
            for c in range(sheet.ncols):
                cell = sheet.cell(r, c)
                if cell.ctype == xlrd.XL_CELL_DATE:
                    row.append(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    row.append(bool(cell.value))
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    row.append(None)
                else:
                    row.append(cell.value)
            rows.append(row)
        yield sheet.name, rows


_ZIP_MAGIC = b"PK\x03\x04"          # .xlsx (OOXML zip container)
_CFB_MAGIC = b"\xd0\xcf\x11\xe0"    # .xls (OLE2 compound file)


def pick_reader(file: FileHandle):
    """Choose the workbook parser from the leading bytes, then the extension."""
    head = file.read_bytes()[:4]
    if head == _ZIP_MAGIC:
        return _xlsx_sheets
    if head == _CFB_MAGIC:
        return _xls_sheets
    return _xls_sheets if file.extension == "xls" else _xlsx_sheets


def render_workbook(sheets) -> str:
    parts: list[str] = []
    for name, rows in sheets:
        parts.append(f"--- Sheet: {name} ---\n")
        for values in rows:
            line = format_row(values)
            if line is not None:
                parts.append(line + "\n")
        parts.append("\n")
    return "".join(parts)


class ExcelExtractor(BaseExtractor):

    def extract(self, file: FileHandle) -> str:
        reader = pick_reader(file)
        try:
            text = render_workbook(reader(file.read_bytes()))
        except Exception as e:
            l.warning(f"Excel extraction failed for {file.name!r}, probing as text: {e}")
            return probe_binary(
                file,
                f"[Excel document: {file.name}]",
                self.config.encoding,
                self.config.binary_threshold,
            )
        if not text:
            return f"[Empty Excel file: {file.name}]"
        return text


register(FileCategory.EXCEL, ExcelExtractor)
