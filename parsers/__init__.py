"""
Upload parsers: tabular reading, source detection and per-schema field mapping.
"""

from parsers.tabular_parser import read_tabular_file, TabularFile
from parsers.schema_detector import detect_source_format, find_missing_headers, required_headers
from parsers.field_mappers import map_records, MAPPERS

__all__ = [
    "read_tabular_file",
    "TabularFile",
    "detect_source_format",
    "find_missing_headers",
    "required_headers",
    "map_records",
    "MAPPERS",
]
