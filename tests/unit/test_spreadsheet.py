"""Tests for sampro.core.spreadsheet — SpreadsheetML rendering."""

from __future__ import annotations

from pathlib import Path

from sampro.core.spreadsheet import escape_xml, render_spreadsheet, write_spreadsheet


class TestEscape:
    def test_special_characters(self) -> None:
        assert escape_xml("""<a & 'b' "c">""") == "&lt;a &amp; &apos;b&apos; &quot;c&quot;&gt;"

    def test_none_is_empty(self) -> None:
        assert escape_xml(None) == ""


class TestRender:
    def test_empty_rows_render_nothing(self) -> None:
        assert render_spreadsheet([]) is None

    def test_header_from_first_row(self) -> None:
        xml = render_spreadsheet([{"الاسم": "قطن", "الكمية": 3}])
        assert xml is not None
        assert '<Cell ss:StyleID="s62"><Data ss:Type="String">الاسم</Data></Cell>' in xml
        assert '<Cell ss:StyleID="s62"><Data ss:Type="String">الكمية</Data></Cell>' in xml
        assert 'ss:RightToLeft="1"' in xml

    def test_cell_types(self) -> None:
        xml = render_spreadsheet([{"name": "A&B", "qty": 2.0, "ratio": 0.5, "flag": True}])
        assert '<Data ss:Type="String">A&amp;B</Data>' in xml
        assert '<Data ss:Type="Number">2</Data>' in xml
        assert '<Data ss:Type="Number">0.5</Data>' in xml
        assert '<Data ss:Type="String">True</Data>' in xml

    def test_rows_follow_first_row_columns(self) -> None:
        xml = render_spreadsheet([{"a": "1", "b": "2"}, {"b": "y", "a": "x", "c": "ignored"}])
        assert "<Row><Cell><Data ss:Type=\"String\">x</Data></Cell><Cell><Data ss:Type=\"String\">y</Data></Cell></Row>" in xml
        assert "ignored" not in xml

    def test_missing_value_is_empty_string(self) -> None:
        xml = render_spreadsheet([{"a": "1", "b": "2"}, {"a": "x"}])
        assert '<Cell><Data ss:Type="String"></Data></Cell>' in xml


class TestWrite:
    def test_writes_xls_file(self, tmp_path: Path) -> None:
        path = write_spreadsheet("colors-list", [{"id": "C001"}], tmp_path)
        assert path == tmp_path / "colors-list.xls"
        assert path.read_text(encoding="utf-8").startswith('<?xml version="1.0"?>')

    def test_no_rows_writes_nothing(self, tmp_path: Path) -> None:
        assert write_spreadsheet("empty", [], tmp_path) is None
        assert list(tmp_path.iterdir()) == []
