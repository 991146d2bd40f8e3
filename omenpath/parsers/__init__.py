from omenpath.parsers.csv_rows import CsvTable, preprocess, read_table
from omenpath.parsers.dek import is_dek_format, parse_dek
from omenpath.parsers.row_parser import RowParser
from omenpath.parsers.tags import TagFlags, apply_tags, parse_tags

__all__ = [
    "CsvTable",
    "RowParser",
    "TagFlags",
    "apply_tags",
    "is_dek_format",
    "parse_dek",
    "parse_tags",
    "preprocess",
    "read_table",
]
