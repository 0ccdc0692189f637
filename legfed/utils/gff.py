"""
Minimal GFF3 record parsing for the synteny and genetic marker converters.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import unquote


def parse_gff_attributes(attr_string: str) -> dict[str, list[str]]:
    """
    Parse a GFF column 9 attribute string into a dict of value lists.

    Values are URL-unescaped and split on commas. Whitespace inside values
    is preserved (the synteny Name carries a trailing strand character).

    Args:
        attr_string: GFF column 9 attributes (key=value;key=value)

    Returns:
        Dict mapping attribute names to lists of values
    """
    attrs: dict[str, list[str]] = {}
    for item in attr_string.split(";"):
        if "=" not in item:
            continue
        key, value = item.split("=", 1)
        attrs[key.strip()] = [unquote(v) for v in value.split(",")]
    return attrs


@dataclass
class GFFRecord:
    """One GFF3 feature line."""

    seqid: str
    source: str
    type: str
    start: int
    end: int
    score: Optional[float]
    strand: Optional[str]
    phase: Optional[str]
    attributes: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_line(cls, line: str) -> "GFFRecord":
        """
        Parse a tab-delimited GFF3 line.

        Raises:
            ValueError: if the line has fewer than 9 columns or bad coordinates
        """
        cols = line.rstrip("\n\r").split("\t")
        if len(cols) < 9:
            raise ValueError(f"GFF line has {len(cols)} columns, expected 9: {line!r}")
        return cls(
            seqid=cols[0],
            source=cols[1],
            type=cols[2],
            start=int(cols[3]),
            end=int(cols[4]),
            score=None if cols[5] in (".", "") else float(cols[5]),
            strand=None if cols[6] in (".", "") else cols[6],
            phase=None if cols[7] in (".", "") else cols[7],
            attributes=parse_gff_attributes(cols[8]),
        )

    def get_attribute(self, name: str) -> Optional[str]:
        values = self.attributes.get(name)
        return values[0] if values else None

    @property
    def id(self) -> Optional[str]:
        return self.get_attribute("ID")

    @property
    def names(self) -> list[str]:
        return list(self.attributes.get("Name", []))

    @property
    def target(self) -> Optional[str]:
        return self.get_attribute("Target")

