"""
CaptureWorkbook — styled openpyxl workbook for capture reports.

Tables are described by ``(key, kind, label)`` columns where ``kind`` is
``text``, ``count``, ``average`` or ``share``. Cells holding the missing-field
placeholder are rendered muted so gaps in the source spreadsheet stand out.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from captacion.config import MISSING_PLACEHOLDER
from captacion.excel.styles import (
    CELL_BORDER, CELL_FONT, CENTER, HEADER_BORDER, HEADER_FILL, HEADER_FONT,
    KPI_LABEL_FONT, KPI_VALUE_FONT, LEFT, NUMBER_FORMATS, PLACEHOLDER_FONT,
    RIGHT, SECTION_FONT, SUBTITLE_FONT, TITLE_FONT, TOTAL_FILL, TOTAL_FONT,
    UNTRACEABLE_FILL, ZEBRA_FILL,
)

Column = tuple[str, str, str]  # (key, kind, label)
RowFlag = Callable[[Mapping[str, Any]], bool]


def _blank(value: Any) -> bool:
    return value is None or (pd.api.types.is_scalar(value) and pd.isna(value))


class CaptureWorkbook:
    """Sheets are added in order; the workbook's default sheet becomes the first one."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._sheets = 0

    def sheet(self, title: str) -> Worksheet:
        ws = self.wb.active if self._sheets == 0 else self.wb.create_sheet()
        ws.title = title
        self._sheets += 1
        return ws

    # -- blocks ---------------------------------------------------------

    def title(self, ws: Worksheet, text: str, subtitle: str, width: int = 6) -> int:
        for row, value, font in ((1, text, TITLE_FONT), (2, subtitle, SUBTITLE_FONT)):
            ws.cell(row=row, column=1, value=value).font = font
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
        return 4

    def section(self, ws: Worksheet, row: int, text: str) -> int:
        ws.cell(row=row, column=1, value=text).font = SECTION_FONT
        return row + 2

    def kpis(self, ws: Worksheet, row: int, cards: Iterable[tuple[Any, str, str]]) -> int:
        """One card per ``(value, label, kind)``, two columns apart. Returns the next row."""
        for i, (value, label, kind) in enumerate(cards):
            col = 1 + 2 * i
            cell = ws.cell(row=row, column=col, value=value)
            cell.font = KPI_VALUE_FONT
            cell.alignment = CENTER
            if kind in NUMBER_FORMATS:
                cell.number_format = NUMBER_FORMATS[kind]
            caption = ws.cell(row=row + 1, column=col, value=label)
            caption.font = KPI_LABEL_FONT
            caption.alignment = CENTER
        return row + 3

    def table(
        self,
        ws: Worksheet,
        row: int,
        columns: list[Column],
        data: list[dict] | pd.DataFrame,
        flag: RowFlag | None = None,
        total: bool = False,
        freeze: bool = False,
    ) -> int:
        """Header, one row per record, optional TOTAL row summing ``count`` columns.

        Rows for which ``flag(row)`` is true get the untraceable fill.
        Returns the row after the table.
        """
        header_row = row
        for col, (_, _, label) in enumerate(columns, 1):
            cell = ws.cell(row=row, column=col, value=label)
            cell.font, cell.fill, cell.border, cell.alignment = HEADER_FONT, HEADER_FILL, HEADER_BORDER, CENTER

        rows = data.to_dict("records") if isinstance(data, pd.DataFrame) else list(data)
        for record in rows:
            row += 1
            fill = UNTRACEABLE_FILL if flag and flag(record) else (ZEBRA_FILL if row % 2 == 0 else None)
            for col, (key, kind, _) in enumerate(columns, 1):
                value = record.get(key)
                self._cell(ws, row, col, "" if _blank(value) else value, kind, fill)

        if total and rows:
            row += 1
            for col, (key, kind, _) in enumerate(columns, 1):
                if col == 1:
                    value = "TOTAL"
                elif kind == "count":
                    value = sum(r.get(key) or 0 for r in rows)
                else:
                    value = ""
                cell = self._cell(ws, row, col, value, kind, TOTAL_FILL)
                cell.font = TOTAL_FONT

        if freeze:
            ws.freeze_panes = f"A{header_row + 1}"
        self._fit_columns(ws)
        return row + 1

    # -- cells ----------------------------------------------------------

    @staticmethod
    def _cell(ws: Worksheet, row: int, col: int, value: Any, kind: str, fill) -> Any:
        cell = ws.cell(row=row, column=col, value=value)
        cell.font = PLACEHOLDER_FONT if value == MISSING_PLACEHOLDER else CELL_FONT
        cell.border = CELL_BORDER
        if kind in NUMBER_FORMATS:
            cell.number_format = NUMBER_FORMATS[kind]
            cell.alignment = RIGHT
        else:
            cell.alignment = LEFT
        if fill is not None:
            cell.fill = fill
        return cell

    @staticmethod
    def _fit_columns(ws: Worksheet, narrowest: int = 10, widest: int = 48) -> None:
        for column in ws.iter_cols():
            longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
            letter = get_column_letter(column[0].column)
            ws.column_dimensions[letter].width = min(max(longest + 2, narrowest), widest)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
