"""Export a spreadsheet sheet to CSV or TSV and upload it to a file store."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, NamedTuple, Optional, Protocol, Sequence, Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .errors import ExportError
from .types import ExportBlob

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    CSV = "csv"
    TSV = "tsv"

    @classmethod
    def parse(cls, name: str) -> "ExportFormat":
        try:
            return cls((name or "").lower())
        except ValueError:
            raise ExportError(f"Input file format '{name}' is not supported.") from None

    @property
    def default_delimiter(self) -> str:
        return "\t" if self is ExportFormat.TSV else ","

    @property
    def content_type(self) -> str:
        return "text/tab-separated-values" if self is ExportFormat.TSV else "text/csv"


class OpenedWorkbook(NamedTuple):
    name: str
    workbook: Workbook


class FileStore(Protocol):
    def create_file(self, blob: ExportBlob) -> str:
        ...


class FolderFileStore:
    """File store backed by a local directory; file URLs are ``file://`` URIs."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise ExportError(f"Target folder '{directory}' does not exist.")

    def create_file(self, blob: ExportBlob) -> str:
        target = self.directory / blob.filename
        target.write_bytes(blob.content.encode("utf-8"))
        return target.resolve().as_uri()


def _source_path(source: str) -> Path:
    if source.startswith("file://"):
        return Path(url2pathname(unquote(urlparse(source).path)))
    return Path(source)


def open_workbook(source: str) -> OpenedWorkbook:
    """Open an ``.xlsx`` workbook from a path or a ``file://`` URL."""
    path = _source_path(source)
    if not path.is_file():
        raise ExportError(f"Workbook '{source}' not found.")
    try:
        workbook = load_workbook(path, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as exc:
        raise ExportError(f"Workbook '{source}' could not be read: {exc}") from exc
    return OpenedWorkbook(name=path.stem, workbook=workbook)


def display_value(value: Any) -> str:
    """Render a cell value as a spreadsheet would show it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def read_display_values(sheet: Worksheet) -> List[List[str]]:
    """Return the used range of *sheet*, from A1 to the last row and column."""
    last_row, last_column = sheet.max_row, sheet.max_column
    if last_row == 1 and last_column == 1 and sheet.cell(row=1, column=1).value is None:
        return []
    rows = sheet.iter_rows(
        min_row=1, max_row=last_row, min_col=1, max_col=last_column, values_only=True
    )
    return [[display_value(value) for value in row] for row in rows]


def generate_sheet_contents(rows: Iterable[Sequence[str]], delimiter: str) -> str:
    """Quote every cell, doubling embedded quotes, one ``\\n``-terminated line per row."""
    lines = []
    for row in rows:
        cells = ['"' + str(cell).replace('"', '""') + '"' for cell in row]
        lines.append(delimiter.join(cells) + "\n")
    return "".join(lines)


def build_export_blob(contents: str, filename: str, export_format: ExportFormat) -> ExportBlob:
    return ExportBlob(
        content=contents,
        content_type=export_format.content_type,
        filename=f"{filename}.{export_format.value}",
    )


def export_sheet(
    workbook_source: str,
    sheet_name: str,
    target_folder: Union[str, Path, FileStore],
    to_format: str = "csv",
    delimiter: Optional[str] = None,
) -> str:
    """Export *sheet_name* of *workbook_source* and return the URL of the new file.

    The file is named ``"<workbook> - <sheet>.<format>"``. *delimiter*
    defaults to ``,`` for CSV and a tab for TSV.
    """
    if not workbook_source:
        raise ExportError("Parameter 'workbook_source' cannot be empty.")
    if not sheet_name:
        raise ExportError("Parameter 'sheet_name' cannot be empty.")
    if not target_folder:
        raise ExportError("Parameter 'target_folder' cannot be empty.")

    export_format = ExportFormat.parse(to_format)
    if isinstance(target_folder, (str, Path)):
        store: FileStore = FolderFileStore(target_folder)
    else:
        store = target_folder

    opened = open_workbook(workbook_source)
    if sheet_name not in opened.workbook.sheetnames:
        raise ExportError(f"Sheet '{sheet_name}' not found in '{opened.name}'.")

    rows = read_display_values(opened.workbook[sheet_name])
    contents = generate_sheet_contents(rows, delimiter or export_format.default_delimiter)
    blob = build_export_blob(contents, f"{opened.name} - {sheet_name}", export_format)

    url = store.create_file(blob)
    logger.info(f"SUCCESS: File exported as {export_format.value}, {url}")
    return url
