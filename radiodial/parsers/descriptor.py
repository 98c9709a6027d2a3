"""
Connection descriptor parsing.

Descriptor syntax::

    scheme://[user[:password]@][host]/[via/...]target[?param=value[&...]]

The short form ``scheme://target`` is also accepted; a bare host with no path
is taken as the target and the interface is left for defaults.
"""

import logging
from typing import Mapping, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from .base import Parser
from ..exceptions import ParseError
from ..types import ConnectionDescriptor, Scheme

logger = logging.getLogger(__name__)

MAX_ALIAS_DEPTH = 8


class DescriptorParser(Parser[ConnectionDescriptor]):
    """Parser for connection descriptor strings."""

    def parse(self, value: str) -> ConnectionDescriptor:
        """
        Parse a descriptor string.

        Args:
            value: Descriptor string (e.g. "ardop:///LA1B?freq=7050.0")

        Returns:
            ConnectionDescriptor

        Raises:
            ParseError: If the scheme is unknown or no target is given
        """
        if not value or "://" not in value:
            raise ParseError("Missing scheme separator '://'", descriptor=value)

        try:
            parts = urlsplit(value.strip())
        except ValueError as e:
            raise ParseError(f"Malformed descriptor: {e}", descriptor=value) from e

        try:
            scheme = Scheme(parts.scheme.lower())
        except ValueError as e:
            raise ParseError(
                f"Unsupported scheme: {parts.scheme!r}", descriptor=value
            ) from e

        user, password, host = self._split_netloc(parts.netloc)

        segments = [unquote(s) for s in parts.path.split("/") if s]
        if segments:
            digis, target = tuple(segments[:-1]), segments[-1]
        elif host:
            digis, target, host = (), host, ""
        else:
            raise ParseError("Missing target", scheme=scheme.value, descriptor=value)

        params = {
            name: tuple(values)
            for name, values in parse_qs(parts.query, keep_blank_values=True).items()
        }

        descriptor = ConnectionDescriptor(
            scheme=scheme,
            target=target,
            host=host,
            user=user,
            password=password,
            digis=digis,
            params=params,
            raw=value,
        )
        logger.debug(f"Parsed descriptor: {descriptor!r}")
        return descriptor

    @staticmethod
    def _split_netloc(netloc: str) -> tuple[Optional[str], Optional[str], str]:
        """Split netloc into (user, password, host)."""
        userinfo, sep, host = netloc.rpartition("@")
        if not sep:
            return None, None, netloc

        user, sep, password = userinfo.partition(":")
        return (unquote(user) or None), (unquote(password) if sep else None), host


class AliasResolver:
    """
    Resolves connect aliases to descriptor strings.

    An alias may point at another alias; chains are followed up to
    ``max_depth`` hops.
    """

    def __init__(self, aliases: Mapping[str, str], max_depth: int = MAX_ALIAS_DEPTH) -> None:
        self.aliases = aliases
        self.max_depth = max_depth

    def resolve(self, value: str) -> str:
        """
        Resolve an alias chain.

        Args:
            value: Alias name or descriptor string

        Returns:
            Descriptor string that is not itself an alias

        Raises:
            ParseError: If the chain exceeds max_depth
        """
        current = value
        for _ in range(self.max_depth + 1):
            aliased = self.aliases.get(current)
            if aliased is None:
                return current
            logger.debug(f"Alias {current!r} -> {aliased!r}")
            current = aliased

        raise ParseError(
            f"Alias chain exceeds {self.max_depth} levels", descriptor=value
        )
