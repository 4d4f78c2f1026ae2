"""Directive keys and per-key field extraction.

A configuration line is a whitespace-delimited directive whose first token is
the key. The key set is closed:

    server <address> <port>
    load <number>Mbps
    num_reqs <integer>
    req_size_dist <path>
    fanout <size> <weight>
    service <dscp> <weight>
    rate <integer>Mbps <weight>

Tokens after the expected fields are ignored. A field that is missing or does
not parse to its type raises ``MalformedFieldError``; values are never
truncated or defaulted.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from flowgen.errors import MalformedFieldError

SERVER = "server"
LOAD = "load"
NUM_REQS = "num_reqs"
REQ_SIZE_DIST = "req_size_dist"
FANOUT = "fanout"
SERVICE = "service"
RATE = "rate"

KEYS: tuple[str, ...] = (SERVER, LOAD, NUM_REQS, REQ_SIZE_DIST, FANOUT, SERVICE, RATE)
MANDATORY_SINGLE_KEYS: tuple[str, ...] = (LOAD, NUM_REQS, REQ_SIZE_DIST)
DISTRIBUTION_KEYS: tuple[str, ...] = (FANOUT, SERVICE, RATE)

# Length limits for string fields
MAX_ADDRESS_LENGTH = 19
MAX_PATH_LENGTH = 79

UNIT_SUFFIX = "Mbps"

# Integer fields are 32-bit signed values
MIN_INT = -(2**31)
MAX_INT = 2**31 - 1
MAX_WEIGHT = MAX_INT
MAX_DSCP = 63

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def split_key(line: str) -> str | None:
    """Return the first whitespace-delimited token of ``line`` or None if blank."""
    tokens = line.split(maxsplit=1)
    return tokens[0] if tokens else None


@dataclass(frozen=True)
class Directive:
    """One tokenized configuration line with its source location."""

    key: str
    tokens: tuple[str, ...]
    line_number: int
    path: Path | None = None

    @classmethod
    def from_line(
        cls, line: str, line_number: int, path: Path | None = None
    ) -> Directive | None:
        tokens = tuple(line.split())
        if not tokens:
            return None
        return cls(key=tokens[0], tokens=tokens[1:], line_number=line_number, path=path)

    def fail(self, message: str) -> NoReturn:
        raise MalformedFieldError(
            f"'{self.key}' {message}", path=self.path, line_number=self.line_number
        )

    def field(self, index: int, name: str) -> str:
        """Return the raw token for field ``index`` (0-based after the key)."""
        if index >= len(self.tokens):
            self.fail(f"is missing field <{name}>")
        return self.tokens[index]

    def int_field(
        self,
        index: int,
        name: str,
        minimum: int = MIN_INT,
        maximum: int = MAX_INT,
    ) -> int:
        token = self.field(index, name)
        if not _INT_RE.fullmatch(token):
            self.fail(f"field <{name}> must be an integer, got '{token}'")
        return self.check_range(int(token), name, minimum, maximum)

    def check_range(self, value: int, name: str, minimum: int, maximum: int) -> int:
        if not minimum <= value <= maximum:
            self.fail(f"field <{name}> must be in {minimum}..{maximum}, got {value}")
        return value

    def weight_field(self, index: int) -> int:
        return self.int_field(index, "weight", minimum=0, maximum=MAX_WEIGHT)

    def unit_field(self, index: int, name: str) -> str:
        """Return the numeric prefix of a ``<number>Mbps`` token.

        The unit may be omitted; the caller validates the prefix.
        """
        token = self.field(index, name)
        if token.endswith(UNIT_SUFFIX):
            return token[: -len(UNIT_SUFFIX)]
        return token

    def string_field(self, index: int, name: str, max_length: int) -> str:
        token = self.field(index, name)
        if len(token) > max_length:
            self.fail(
                f"field <{name}> exceeds {max_length} characters: '{token}'"
            )
        return token


def parse_server(directive: Directive) -> tuple[str, int]:
    """Return ``(address, port)`` from a ``server`` directive."""
    address = directive.string_field(0, "address", MAX_ADDRESS_LENGTH)
    port = directive.int_field(1, "port", minimum=1, maximum=65535)
    return address, port


def parse_load(directive: Directive) -> float:
    """Return offered load in Mbps from a ``load`` directive."""
    number = directive.unit_field(0, "value")
    if not _FLOAT_RE.fullmatch(number):
        directive.fail(
            f"field <value> must be a number in {UNIT_SUFFIX}, got '{directive.tokens[0]}'"
        )
    load = float(number)
    if not math.isfinite(load) or load <= 0:
        directive.fail(f"field <value> must be positive, got {load}")
    return load


def parse_num_reqs(directive: Directive) -> int:
    """Return total request count from a ``num_reqs`` directive."""
    return directive.int_field(0, "value", minimum=1)


def parse_req_size_dist(directive: Directive) -> Path:
    """Return the request-size distribution file name; existence is not checked."""
    return Path(directive.string_field(0, "path", MAX_PATH_LENGTH))


def parse_fanout(directive: Directive) -> tuple[int, int]:
    """Return ``(size, weight)``; a request reaches at least one target."""
    return directive.int_field(0, "size", minimum=1), directive.weight_field(1)


def parse_service(directive: Directive) -> tuple[int, int]:
    """Return ``(dscp, weight)``; DSCP is a 6-bit code point."""
    dscp = directive.int_field(0, "dscp", minimum=0, maximum=MAX_DSCP)
    return dscp, directive.weight_field(1)


def parse_rate(directive: Directive) -> tuple[int, int]:
    """Return ``(rate_mbps, weight)``; the rate token carries the unit suffix.

    A rate of 0 means no cap.
    """
    number = directive.unit_field(0, "value")
    if not _INT_RE.fullmatch(number):
        directive.fail(
            f"field <value> must be an integer in {UNIT_SUFFIX}, got '{directive.tokens[0]}'"
        )
    rate = directive.check_range(int(number), "value", 0, MAX_INT)
    return rate, directive.weight_field(1)
