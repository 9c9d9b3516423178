"""
CSV table tests - parsing, rendering, escaping, failures
"""

import re

import pytest

from shortdown.lib.tables import CsvTable, path_resolve, table_load, table_parse, table_render
from shortdown.models.errors import ErrorKind, MalformedTableError, ResourceNotFoundError


def csv_write(tmp_path, text, name="data.csv", encoding="utf-8"):
    path = tmp_path / name
    path.write_bytes(text.encode(encoding))
    return path


class TestParsing:
    """RFC 4180 parsing"""

    def test_simple(self, tmp_path):
        """Header and one data row"""
        table = table_load(csv_write(tmp_path, "a,b\n1,2\n"))

        assert table.header == ["a", "b"]
        assert table.rows == [["1", "2"]]

    def test_quoted_comma_and_newline(self, tmp_path):
        """Quoted fields may hold commas and newlines"""
        table = table_load(csv_write(tmp_path, 'name,note\n"Smith, J","line1\nline2"\n'))
        assert table.rows == [["Smith, J", "line1\nline2"]]

    def test_doubled_quote(self, tmp_path):
        """"" inside a quoted field is a literal quote"""
        table = table_load(csv_write(tmp_path, 'q\n"He said ""hi"""\n'))
        assert table.rows == [['He said "hi"']]

    def test_whitespace_preserved(self, tmp_path):
        """Whitespace outside quotes is kept"""
        table = table_load(csv_write(tmp_path, "a, b\n 1 ,2 \n"))

        assert table.header == ["a", " b"]
        assert table.rows == [[" 1 ", "2 "]]

    def test_header_only(self, tmp_path):
        """A single row is a header with no body"""
        table = table_load(csv_write(tmp_path, "a,b,c\n"))

        assert table.header == ["a", "b", "c"]
        assert table.rows == []

    def test_no_trailing_newline(self, tmp_path):
        """Last record without newline"""
        table = table_load(csv_write(tmp_path, "a,b\n1,2"))
        assert table.rows == [["1", "2"]]

    def test_crlf_line_endings(self, tmp_path):
        """Windows line endings"""
        table = table_load(csv_write(tmp_path, "a,b\r\n1,2\r\n"))
        assert table.rows == [["1", "2"]]

    def test_byte_order_mark_stripped(self, tmp_path):
        """A UTF-8 BOM does not end up in the first header cell"""
        table = table_load(csv_write(tmp_path, "a,b\n1,2\n", encoding="utf-8-sig"))
        assert table.header == ["a", "b"]

    def test_blank_lines_skipped(self, tmp_path):
        """Empty records are ignored"""
        table = table_load(csv_write(tmp_path, "a,b\n\n1,2\n\n3,4\n"))
        assert table.rows == [["1", "2"], ["3", "4"]]

    def test_first_row_always_header(self):
        """Numeric first rows are still headers"""
        table = table_parse(["1,2\n", "3,4\n"])
        assert table.header == ["1", "2"]


class TestMalformed:
    """Errors surface instead of padding or truncating"""

    def test_too_many_cells(self, tmp_path):
        """Row index 1 has three cells against a two-cell header"""
        path = csv_write(tmp_path, "a,b\n1,2,3\n")
        with pytest.raises(MalformedTableError) as info:
            table_load(path)

        assert info.value.row == 1
        assert info.value.path == str(path)
        assert info.value.kind is ErrorKind.MALFORMED_TABLE

    def test_too_few_cells(self, tmp_path):
        """Short rows are reported with their index"""
        with pytest.raises(MalformedTableError) as info:
            table_load(csv_write(tmp_path, "a,b,c\n1,2,3\n4,5\n"))
        assert info.value.row == 2

    def test_empty_file(self, tmp_path):
        """No header row at all"""
        with pytest.raises(MalformedTableError, match="no header"):
            table_load(csv_write(tmp_path, ""))

    def test_unterminated_quote(self, tmp_path):
        """Broken quoting is a malformed table"""
        with pytest.raises(MalformedTableError, match="Invalid CSV quoting"):
            table_load(csv_write(tmp_path, 'a,b\n"1,2\n'))

    def test_text_after_closing_quote(self, tmp_path):
        """Strict parsing rejects text glued to a closing quote"""
        with pytest.raises(MalformedTableError):
            table_load(csv_write(tmp_path, 'a,b\n"1"x,2\n'))

    def test_undecodable_bytes(self, tmp_path):
        """Bytes that are not valid UTF-8 are a malformed table, not a crash"""
        path = tmp_path / "latin1.csv"
        path.write_bytes(b"a,b\n\xff\xfe,2\n")
        with pytest.raises(MalformedTableError, match="not valid text") as info:
            table_load(path)

        assert info.value.path == str(path)
        assert isinstance(info.value.__cause__, UnicodeDecodeError)


class TestMissingFiles:
    """Missing data files"""

    def test_missing(self, tmp_path):
        """Missing path raises ResourceNotFoundError naming it"""
        path = tmp_path / "nope.csv"
        with pytest.raises(ResourceNotFoundError) as info:
            table_load(path)

        assert info.value.path == str(path)
        assert "nope.csv" in str(info.value)

    def test_directory(self, tmp_path):
        """A directory is not a data file"""
        with pytest.raises(ResourceNotFoundError):
            table_load(tmp_path)

    def test_path_resolve(self, tmp_path):
        """Relative src joins the base dir; absolute src is kept"""
        assert path_resolve("x.csv", tmp_path) == tmp_path / "x.csv"
        assert path_resolve(str(tmp_path / "y.csv"), "/elsewhere") == tmp_path / "y.csv"


class TestRendering:
    """HTML output"""

    def test_structure(self):
        """One header row, one body row per data row"""
        html = table_render(CsvTable(header=["a", "b"], rows=[["1", "2"]]))

        assert html == (
            "<table>\n"
            "<thead>\n"
            "<tr><th>a</th><th>b</th></tr>\n"
            "</thead>\n"
            "<tbody>\n"
            "<tr><td>1</td><td>2</td></tr>\n"
            "</tbody>\n"
            "</table>"
        )

    def test_class_attribute(self):
        """Optional class is placed on the table element"""
        html = table_render(CsvTable(header=["a"]), css_class="data wide")
        assert html.startswith('<table class="data wide">')

    def test_header_only_has_empty_body(self):
        """Header-only tables still emit an empty tbody"""
        html = table_render(CsvTable(header=["a", "b"]))

        assert "<tbody>\n</tbody>" in html
        assert "<td>" not in html

    def test_cells_per_row_match_header(self, tmp_path):
        """Every body row has as many cells as the header"""
        table = table_load(csv_write(tmp_path, 'a,b,c\n1,2,3\n"x,y",,z\n'))
        html = table_render(table)

        header_cells = len(re.findall(r"<th>", html))
        body_rows = re.findall(r"<tr>(<td>.*?</td>)+</tr>", html)
        for row in re.findall(r"<tr><td>.*?</tr>", html):
            assert row.count("<td>") == header_cells
        assert len(body_rows) == 2

    def test_script_is_escaped(self):
        """Markup in cells is shown, never executed"""
        html = table_render(CsvTable(header=["<b>h</b>"], rows=[["<script>alert('x')</script>"]]))

        assert "<script>" not in html
        assert "&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;" in html
        assert "<th>&lt;b&gt;h&lt;/b&gt;</th>" in html

    def test_ampersand_and_quotes_escaped(self):
        """&, double and single quotes are escaped"""
        html = table_render(CsvTable(header=["h"], rows=[['Tom & "Jerry"']]))
        assert "<td>Tom &amp; &quot;Jerry&quot;</td>" in html

    def test_class_is_escaped(self):
        """Class values cannot break out of the attribute"""
        html = table_render(CsvTable(header=["h"]), css_class='x" onclick="y')
        assert html.startswith('<table class="x&quot; onclick=&quot;y">')
