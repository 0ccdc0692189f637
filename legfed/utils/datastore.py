"""
LIS datastore conventions.

Identifiers in the LIS datastore are dotted, e.g.
phavu.G19833.gnm2.Chr01 or cicar.CDCFrontier.gnm1.C11044140, and
supercontigs have to be recognised from the name alone.
"""

import hashlib
from decimal import ROUND_HALF_UP, Decimal


def is_supercontig(identifier: str) -> bool:
    """
    Return True if a sequence identifier names a supercontig rather than a chromosome.

    Args:
        identifier: Sequence primary identifier

    Returns:
        True for scaffolds / contigs, False for chromosomes
    """
    lc = identifier.lower()
    if "scaffold" in lc or "contig" in lc or "pilon" in lc:
        return True
    if "Aipa" in identifier or "Adur" in identifier:
        return True

    parts = identifier.split(".")
    if len(parts) >= 4:
        # cicar.CDCFrontier.gnm1.C11044140
        if len(parts[3]) == 9 and parts[3].startswith("C"):
            return True
        # glyma.Lee.gnm1.sc119
        if parts[1] == "Lee" and parts[3].startswith("sc"):
            return True
        # glyso.PI483463.gnm1.sc255
        if parts[0] == "glyso" and parts[3].startswith("sc"):
            return True
        # medtr.jemalong_A17.gnm5.MtrunA17Chr0c01
        if "Chr0c" in parts[3]:
            return True

    return False


def round_half_up(value: float, places: int) -> float:
    """
    Round a float to the given number of decimal places, halves away from zero.

    Raises:
        ValueError: if places is negative
    """
    if places < 0:
        raise ValueError("places must be non-negative")
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def md5_checksum(residues: str) -> str:
    """Hex MD5 of a residue string, as stored in Sequence.md5checksum."""
    return hashlib.md5(residues.encode()).hexdigest()
