"""
SpreadsheetML (Excel 2003 XML) export of flat records.

The header row comes from the keys of the first record; every row is read in
that column order.  Numbers are written as ``Number`` cells, everything else as
``String`` cells, and every value is XML-escaped.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from sampro.core.constants import SPREADSHEET_SUFFIX

_ESCAPES = {"<": "&lt;", ">": "&gt;", "&": "&amp;", "'": "&apos;", '"': "&quot;"}

_TEMPLATE = """<?xml version="1.0"?>
<?mso-application progid="Excel.Sheet"?>
<Workbook xmlns="urn:schemas-microsoft-com:office:spreadsheet"
  xmlns:o="urn:schemas-microsoft-com:office:office"
  xmlns:x="urn:schemas-microsoft-com:office:excel"
  xmlns:ss="urn:schemas-microsoft-com:office:spreadsheet"
  xmlns:html="http://www.w3.org/TR/REC-html40">
  <Styles>
    <Style ss:ID="Default" ss:Name="Normal">
      <Alignment ss:Vertical="Bottom"/>
      <Borders/>
      <Font ss:FontName="Calibri" x:Family="Swiss" ss:Size="11" ss:Color="#000000"/>
      <Interior/>
      <NumberFormat/>
      <Protection/>
    </Style>
    <Style ss:ID="s62">
      <Font ss:FontName="Calibri" x:Family="Swiss" ss:Size="11" ss:Color="#000000" ss:Bold="1"/>
    </Style>
  </Styles>
  <Worksheet ss:Name="Sheet1" ss:RightToLeft="1">
    <Table>
      {header}
      {rows}
    </Table>
  </Worksheet>
</Workbook>"""


def escape_xml(value: Any) -> str:
    text = "" if value is None else str(value)
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _cell(value: Any) -> str:
    if _is_number(value):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return f'<Cell><Data ss:Type="Number">{escape_xml(value)}</Data></Cell>'
    return f'<Cell><Data ss:Type="String">{escape_xml(value)}</Data></Cell>'


def render_spreadsheet(rows: Sequence[Mapping[str, Any]]) -> str | None:
    """Return the workbook XML for *rows*, or None when there is nothing to export."""
    if not rows:
        return None

    headers = list(rows[0].keys())
    header = "<Row>{}</Row>".format(
        "".join(
            f'<Cell ss:StyleID="s62"><Data ss:Type="String">{escape_xml(h)}</Data></Cell>'
            for h in headers
        )
    )
    body = "".join(
        "<Row>{}</Row>".format("".join(_cell(row.get(h)) for h in headers)) for row in rows
    )
    return _TEMPLATE.format(header=header, rows=body)


def write_spreadsheet(name: str, rows: Sequence[Mapping[str, Any]], directory: Path) -> Path | None:
    """Write ``<name>.xls`` into *directory*; returns None and writes nothing for no rows."""
    xml = render_spreadsheet(rows)
    if xml is None:
        return None
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}{SPREADSHEET_SUFFIX}"
    path.write_text(xml, encoding="utf-8")
    return path
