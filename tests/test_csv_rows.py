"""Tests for CSV preprocessing and table reading."""

from omenpath.parsers.csv_rows import preprocess, read_headers, read_table


class TestPreprocess:
    def test_strips_bom(self) -> None:
        assert preprocess("\ufeffCount,Name\n") == "Count,Name\n"

    def test_strips_excel_separator_hint(self) -> None:
        """A leading "sep=," line is Excel metadata, not a header."""
        assert preprocess("sep=,\nCount,Name\n1,Bolt\n") == "Count,Name\n1,Bolt\n"

    def test_leaves_normal_text_alone(self) -> None:
        assert preprocess("Count,Name\n") == "Count,Name\n"


class TestReadTable:
    def test_reads_rows_with_line_numbers(self) -> None:
        table = read_table("Count,Name\n1,Lightning Bolt\n4,Counterspell\n")

        assert table.headers == ("Count", "Name")
        assert table.rows == [
            {"Count": "1", "Name": "Lightning Bolt"},
            {"Count": "4", "Name": "Counterspell"},
        ]
        assert table.row_numbers == [2, 3]

    def test_skips_blank_lines(self) -> None:
        table = read_table("Count,Name\n\n1,Lightning Bolt\n,\n")

        assert len(table.rows) == 1
        assert table.row_numbers == [3]

    def test_multiline_cell_keeps_source_lines(self) -> None:
        """Row numbers follow the physical line each record starts on."""
        table = read_table('Name,Notes\nIsland,"first\nsecond"\nForest,\n')

        assert [row["Name"] for row in table.rows] == ["Island", "Forest"]
        assert table.row_numbers == [2, 4]

    def test_separator_hint_counts_as_a_line(self) -> None:
        table = read_table("sep=,\nCount,Name\n1,Lightning Bolt\n")

        assert table.headers == ("Count", "Name")
        assert table.row_numbers == [3]

    def test_pads_short_rows(self) -> None:
        table = read_table("Count,Name,Edition\n1,Lightning Bolt\n")

        assert table.rows[0]["Edition"] == ""

    def test_first_duplicate_header_wins(self) -> None:
        table = read_table("Name,Name\nFirst,Second\n")

        assert table.rows[0] == {"Name": "First"}

    def test_quoted_values_with_commas(self) -> None:
        table = read_table('Count,Name\n1,"Jace, the Mind Sculptor"\n')

        assert table.rows[0]["Name"] == "Jace, the Mind Sculptor"

    def test_headers_are_stripped(self) -> None:
        assert read_headers(" Count , Name \n1,x\n") == ("Count", "Name")

    def test_empty_text(self) -> None:
        table = read_table("")

        assert table.headers == ()
        assert table.rows == []
