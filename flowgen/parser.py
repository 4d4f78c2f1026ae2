"""Two-pass client configuration parser.

The first pass validates the key set and counts directives without keeping
any values. Tables are then allocated to exactly the counted sizes and a
second pass over the same file fills them, using per-key cursors that start
at zero. Distributions that received no entries are given their default
single entry afterwards.

Nothing here keeps module-level state, so every call starts from zero.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Iterator, TextIO

from flowgen.config import ClientConfig, Server
from flowgen.directives import (
    DISTRIBUTION_KEYS,
    FANOUT,
    KEYS,
    LOAD,
    MANDATORY_SINGLE_KEYS,
    NUM_REQS,
    RATE,
    REQ_SIZE_DIST,
    SERVER,
    SERVICE,
    Directive,
    parse_fanout,
    parse_load,
    parse_num_reqs,
    parse_rate,
    parse_req_size_dist,
    parse_server,
    parse_service,
    split_key,
)
from flowgen.distribution import (
    DEFAULT_FANOUT,
    DEFAULT_RATE,
    DEFAULT_SERVICE,
    MAX_WEIGHT_TOTAL,
    WeightedDistribution,
    WeightedEntry,
    synthesize_default,
)
from flowgen.errors import (
    AllocationError,
    CardinalityError,
    ConfigError,
    ConfigFileError,
    SchemaError,
)
from flowgen.log_config import get_logger

logger = get_logger(__name__)

_DEFAULT_ENTRIES: dict[str, WeightedEntry] = {
    FANOUT: DEFAULT_FANOUT,
    SERVICE: DEFAULT_SERVICE,
    RATE: DEFAULT_RATE,
}

# Log labels per distribution, e.g. "Fanout: 2, Prob: 50"
_ENTRY_FORMATS: dict[str, str] = {
    FANOUT: "Fanout: {value}, Prob: {weight}",
    SERVICE: "Service DSCP: {value}, Prob: {weight}",
    RATE: "Rate: {value}Mbps, Prob: {weight}",
}

_DISTRIBUTION_PARSERS = {
    FANOUT: parse_fanout,
    SERVICE: parse_service,
    RATE: parse_rate,
}


@dataclass(frozen=True)
class DirectiveCounts:
    """Number of lines seen per directive key in the counting pass."""

    server: int = 0
    load: int = 0
    num_reqs: int = 0
    req_size_dist: int = 0
    fanout: int = 0
    service: int = 0
    rate: int = 0

    def get(self, key: str) -> int:
        return getattr(self, key)

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@contextmanager
def _open_config(config_path: Path) -> Iterator[TextIO]:
    """Open the configuration file, mapping I/O failures to ``ConfigFileError``."""
    try:
        handle = open(config_path, "r", encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(
            f"cannot open configuration file: {e.strerror or e}", path=config_path
        ) from e
    with handle:
        try:
            yield handle
        except UnicodeDecodeError as e:
            raise ConfigFileError(
                f"configuration file is not valid UTF-8: {e.reason}", path=config_path
            ) from e


def count_directives(config_path: Path) -> DirectiveCounts:
    """Validate directive keys and count them (first pass).

    Args:
        config_path: Path to the configuration file.

    Returns:
        Per-key line counts.

    Raises:
        ConfigFileError: If the file cannot be opened.
        SchemaError: On the first unrecognized key.
    """
    counts = dict.fromkeys(KEYS, 0)
    with _open_config(config_path) as handle:
        for line_number, line in enumerate(handle, start=1):
            key = split_key(line)
            if key is None:
                continue
            if key not in counts:
                raise SchemaError(
                    f"invalid key '{key}' in configuration file",
                    path=config_path,
                    line_number=line_number,
                )
            counts[key] += 1
    result = DirectiveCounts(**counts)
    logger.debug(f"Directive counts: {result.as_dict()}")
    return result


def check_cardinality(counts: DirectiveCounts, config_path: Path | None = None) -> None:
    """Check mandatory directive multiplicities.

    Raises:
        CardinalityError: If there is no server, or ``load``, ``num_reqs`` or
            ``req_size_dist`` does not appear exactly once.
    """
    if counts.server < 1:
        raise CardinalityError(
            "configuration file should provide at least one server", path=config_path
        )
    descriptions = {
        LOAD: "one network load",
        NUM_REQS: "one total number of requests",
        REQ_SIZE_DIST: "one request size distribution",
    }
    for key in MANDATORY_SINGLE_KEYS:
        found = counts.get(key)
        if found != 1:
            raise CardinalityError(
                f"configuration file should provide {descriptions[key]} "
                f"('{key}' found {found} times)",
                path=config_path,
            )


class ConfigTables:
    """Exactly sized tables filled by the extraction pass.

    Server slots match the counted ``server`` lines. Each distribution gets
    ``max(count, 1)`` slots so a default entry always fits. ``cursors`` hold
    the next free slot per key and end equal to the counts.
    """

    def __init__(self) -> None:
        self.counts = DirectiveCounts()
        self.servers: list[Server | None] = []
        self.distributions: dict[str, list[WeightedEntry | None]] = {}
        self.cursors: dict[str, int] = dict.fromkeys(KEYS, 0)
        self.load_mbps = 0.0
        self.request_total_count = 0
        self.size_dist_file: Path | None = None

    def allocate(self, counts: DirectiveCounts) -> None:
        self.counts = counts
        self.servers = [None] * counts.server
        for key in DISTRIBUTION_KEYS:
            self.distributions[key] = [None] * max(counts.get(key), 1)

    def release(self) -> None:
        self.servers = []
        self.distributions = {}

    def next_slot(self, directive: Directive) -> int:
        """Return and advance the cursor for ``directive.key``.

        Raises:
            ConfigError: If the file now holds more lines for this key than
                the counting pass saw.
        """
        key = directive.key
        slot = self.cursors[key]
        if slot >= self.counts.get(key):
            raise ConfigError(
                f"configuration file changed between passes: extra '{key}' line",
                path=directive.path,
                line_number=directive.line_number,
            )
        self.cursors[key] = slot + 1
        return slot


def allocate_tables(counts: DirectiveCounts, config_path: Path | None = None) -> ConfigTables:
    """Allocate tables sized from the counting pass.

    Raises:
        AllocationError: If memory for the tables cannot be obtained. Tables
            allocated before the failure are released first.
    """
    tables = ConfigTables()
    try:
        tables.allocate(counts)
    except MemoryError as e:
        tables.release()
        raise AllocationError("cannot allocate configuration tables", path=config_path) from e
    return tables


def extract_directives(config_path: Path, tables: ConfigTables) -> None:
    """Fill allocated tables from the configuration file (second pass).

    Keys were validated by ``count_directives``; only fields are parsed here.

    Raises:
        ConfigFileError: If the file cannot be opened.
        MalformedFieldError: If a directive's fields do not parse.
        ConfigError: If the file changed since the counting pass.
    """
    with _open_config(config_path) as handle:
        for line_number, line in enumerate(handle, start=1):
            directive = Directive.from_line(line, line_number, config_path)
            if directive is None:
                continue
            _apply_directive(directive, tables)

    for key in KEYS:
        if tables.cursors[key] != tables.counts.get(key):
            raise ConfigError(
                f"configuration file changed between passes: expected "
                f"{tables.counts.get(key)} '{key}' lines, found {tables.cursors[key]}",
                path=config_path,
            )


def _apply_directive(directive: Directive, tables: ConfigTables) -> None:
    key = directive.key
    if key == SERVER:
        address, port = parse_server(directive)
        slot = tables.next_slot(directive)
        tables.servers[slot] = Server(address=address, port=port)
        logger.info(f"Server[{slot}]: {address}, Port: {port}")
    elif key == LOAD:
        tables.load_mbps = parse_load(directive)
        tables.next_slot(directive)
        logger.info(f"Network Load: {tables.load_mbps:.2f} Mbps")
    elif key == NUM_REQS:
        tables.request_total_count = parse_num_reqs(directive)
        tables.next_slot(directive)
        logger.info(f"Number of Requests: {tables.request_total_count}")
    elif key == REQ_SIZE_DIST:
        tables.size_dist_file = parse_req_size_dist(directive)
        tables.next_slot(directive)
        logger.info(f"Loading request size distribution: {tables.size_dist_file}")
    elif key in _DISTRIBUTION_PARSERS:
        value, weight = _DISTRIBUTION_PARSERS[key](directive)
        slot = tables.next_slot(directive)
        tables.distributions[key][slot] = WeightedEntry(value=value, weight=weight)
        logger.info(_ENTRY_FORMATS[key].format(value=value, weight=weight))


def _finalize_distribution(
    key: str, tables: ConfigTables, config_path: Path
) -> WeightedDistribution:
    """Build the final distribution for ``key``, synthesizing its default if empty."""
    filled = tables.distributions[key][: tables.cursors[key]]
    entries = synthesize_default(
        (e for e in filled if e is not None), _DEFAULT_ENTRIES[key]
    )
    if not filled:
        default = entries[0]
        logger.info(_ENTRY_FORMATS[key].format(value=default.value, weight=default.weight))
    total = sum(e.weight for e in entries)
    if total > MAX_WEIGHT_TOTAL:
        raise ConfigError(
            f"'{key}' weights sum to {total}, above the limit of {MAX_WEIGHT_TOTAL}",
            path=config_path,
        )
    dist = WeightedDistribution(name=key, entries=entries)
    if dist.weight_total <= 0:
        raise ConfigError(f"'{key}' weights must not all be zero", path=config_path)
    return dist


def parse_config(config_path: Path, seed: int | None = None) -> ClientConfig:
    """Parse a client configuration file into a ``ClientConfig``.

    Args:
        config_path: Path to the configuration file.
        seed: Random seed established for the run, recorded on the model.

    Returns:
        Populated, read-only configuration.

    Raises:
        ConfigError: Any configuration failure; see ``flowgen.errors``.
    """
    config_path = Path(config_path)
    logger.info(f"Reading configuration file {config_path}")

    counts = count_directives(config_path)
    check_cardinality(counts, config_path)

    tables = allocate_tables(counts, config_path)
    try:
        extract_directives(config_path, tables)
        fanout = _finalize_distribution(FANOUT, tables, config_path)
        service = _finalize_distribution(SERVICE, tables, config_path)
        rate = _finalize_distribution(RATE, tables, config_path)
        servers = tuple(s for s in tables.servers if s is not None)
        config = ClientConfig(
            servers=servers,
            load_mbps=tables.load_mbps,
            request_total_count=tables.request_total_count,
            size_dist_file=tables.size_dist_file,
            fanout=fanout,
            service=service,
            rate=rate,
            seed=seed,
            _source_path=config_path,
        )
    finally:
        tables.release()

    logger.info(
        f"Parsed {len(config.servers)} servers, {len(fanout)} fanout, "
        f"{len(service)} service and {len(rate)} rate entries"
    )
    return config
