"""
Base parser classes and utilities.

Provides reusable parsing functionality for descriptor strings and parameter
values.
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

from ..exceptions import ParseError
from ..types import Frequency

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Parser(ABC, Generic[T]):
    """
    Abstract base class for value parsers.

    Parsers convert raw strings into typed data structures.
    """

    @abstractmethod
    def parse(self, value: str) -> T:
        """
        Parse a raw string.

        Args:
            value: Raw string

        Returns:
            Parsed data structure

        Raises:
            ParseError: If value cannot be parsed
        """
        pass


class BoolValueParser(Parser[bool]):
    """Parser for boolean parameters (same spellings as Go's ParseBool)."""

    TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
    FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}

    def parse(self, value: str) -> bool:
        """Parse boolean value."""
        if value in self.TRUE_VALUES:
            return True
        if value in self.FALSE_VALUES:
            return False
        raise ParseError(f"Invalid boolean value: {value!r}")


class FrequencyParser(Parser[Frequency]):
    """Parser for dial frequencies given in kHz (e.g. "7050.0")."""

    def parse(self, value: str) -> Frequency:
        """Parse kHz string into a Frequency in Hz."""
        try:
            khz = float(value)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid frequency: {value!r}") from e

        hz = round(khz * 1e3)
        if hz <= 0:
            raise ParseError(f"Frequency must be positive: {value!r}")

        return Frequency(hz)
