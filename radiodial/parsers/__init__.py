"""
Parsers for connection descriptors and parameter values.
"""

from .base import Parser, BoolValueParser, FrequencyParser
from .descriptor import DescriptorParser, AliasResolver, MAX_ALIAS_DEPTH

__all__ = [
    "Parser",
    "BoolValueParser",
    "FrequencyParser",
    "DescriptorParser",
    "AliasResolver",
    "MAX_ALIAS_DEPTH",
]
