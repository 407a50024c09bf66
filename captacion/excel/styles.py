"""
Workbook palette: CLC purple headers, muted placeholders, red rows for records
that cannot be traced to a client.
"""
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

PURPLE = "7E22CE"
DEEP_PURPLE = "4C1D95"
LAVENDER = "EDE9FE"
ZEBRA = "F7F5FB"
ROSE = "FDE2E4"
INK = "1F2937"
MUTED = "6B7280"
GRID = "D4D4D8"

_FONT = "Calibri"


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _box(color: str, bottom: str = "thin") -> Border:
    side = Side(style="thin", color=color)
    return Border(left=side, right=side, top=side, bottom=Side(style=bottom, color=color))


TITLE_FONT = Font(name=_FONT, size=22, bold=True, color=DEEP_PURPLE)
SUBTITLE_FONT = Font(name=_FONT, size=11, italic=True, color=MUTED)
SECTION_FONT = Font(name=_FONT, size=13, bold=True, color=DEEP_PURPLE)
HEADER_FONT = Font(name=_FONT, size=10, bold=True, color="FFFFFF")
CELL_FONT = Font(name=_FONT, size=10, color=INK)
PLACEHOLDER_FONT = Font(name=_FONT, size=10, italic=True, color=MUTED)
TOTAL_FONT = Font(name=_FONT, size=10, bold=True, color=INK)
KPI_VALUE_FONT = Font(name=_FONT, size=26, bold=True, color=PURPLE)
KPI_LABEL_FONT = Font(name=_FONT, size=9, color=MUTED)

HEADER_FILL = _solid(DEEP_PURPLE)
TOTAL_FILL = _solid(LAVENDER)
ZEBRA_FILL = _solid(ZEBRA)
UNTRACEABLE_FILL = _solid(ROSE)

CELL_BORDER = _box(GRID)
HEADER_BORDER = _box(DEEP_PURPLE, bottom="medium")

CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")

# Cell kind → number format (text kinds are absent)
NUMBER_FORMATS = {
    "count": "#,##0",
    "average": "0.00",
    "share": '0.0"%"',
}
