"""
LegFed Utility Library.

Modules:
--------
logging_setup
    Logging configuration utilities.
file_io
    Gzip-aware file opening and tab-delimited line helpers.
datastore
    LIS datastore naming conventions (supercontig detection, rounding, checksums).
gff
    GFF3 record parsing.
"""

from legfed.utils.logging_setup import setup_logging
from legfed.utils.file_io import open_file, is_readme, split_line, is_comment_or_blank
from legfed.utils.datastore import is_supercontig, md5_checksum, round_half_up
from legfed.utils.gff import GFFRecord, parse_gff_attributes

__all__ = [
    "setup_logging",
    "open_file",
    "is_readme",
    "split_line",
    "is_comment_or_blank",
    "is_supercontig",
    "md5_checksum",
    "round_half_up",
    "GFFRecord",
    "parse_gff_attributes",
]
