"""
Chado database source.

ChadoDBConverter resolves the configured organisms against the chado
organism table, then runs the configured processors in order.
"""

from legfed.chado.converter import ChadoDBConverter
from legfed.chado.feature import ChadoFeature
from legfed.chado.processors import PROCESSORS, ChadoProcessor

__all__ = ["ChadoDBConverter", "ChadoFeature", "ChadoProcessor", "PROCESSORS"]
