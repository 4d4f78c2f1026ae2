"""Client configuration model.

``ClientConfig`` owns every value parsed from a client configuration file:
the server table, the workload scalars and the three weighted distributions
(fan-out, service class, sending rate). It is built once by
``flowgen.parser.parse_config`` and is read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from flowgen.distribution import WeightedDistribution
from flowgen.log_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Server:
    """Target server address and port, addressed later by table index."""

    address: str
    port: int


@dataclass(frozen=True)
class ClientConfig:
    """Parsed workload configuration for one client run.

    Attributes:
        servers: Server table in file order; duplicates are kept.
        load_mbps: Target aggregate offered load in Mbps.
        request_total_count: Total number of requests to issue.
        size_dist_file: Request-size distribution file name. Loaded elsewhere.
        fanout: Fan-out degree distribution.
        service: Service class (DSCP) distribution.
        rate: Per-flow sending-rate cap distribution in Mbps (0 means no cap).
        seed: Random seed established for the run, if any.
    """

    servers: tuple[Server, ...] = ()
    load_mbps: float = 0.0
    request_total_count: int = 0
    size_dist_file: Path | None = None
    fanout: WeightedDistribution | None = None
    service: WeightedDistribution | None = None
    rate: WeightedDistribution | None = None
    seed: int | None = None
    _source_path: Path | None = None
    _closed: bool = False

    @classmethod
    def from_file(cls, config_path: Path | str, seed: int | None = None) -> ClientConfig:
        """Parse a client configuration file.

        Args:
            config_path: Path to the configuration file.
            seed: Random seed established for the run, recorded on the model.

        Returns:
            Populated configuration.

        Raises:
            ConfigError: If the file cannot be read or is invalid.
        """
        from flowgen.parser import parse_config

        return parse_config(Path(config_path), seed=seed)

    @property
    def source_path(self) -> Path | None:
        return self._source_path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def distributions(self) -> dict[str, WeightedDistribution | None]:
        return {"fanout": self.fanout, "service": self.service, "rate": self.rate}

    def close(self) -> None:
        """Release the server table and all distribution tables.

        Scalar fields are left untouched. Calling it again, or on a model that
        was never populated, does nothing.
        """
        if self._closed:
            return
        object.__setattr__(self, "servers", ())
        object.__setattr__(self, "fanout", None)
        object.__setattr__(self, "service", None)
        object.__setattr__(self, "rate", None)
        object.__setattr__(self, "_closed", True)
        logger.debug("Released configuration tables")

    def __enter__(self) -> ClientConfig:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def to_dict(self) -> dict[str, Any]:
        """Return a plain mapping of the parsed configuration."""
        return {
            "servers": [{"address": s.address, "port": s.port} for s in self.servers],
            "load_mbps": self.load_mbps,
            "num_reqs": self.request_total_count,
            "req_size_dist": (
                str(self.size_dist_file) if self.size_dist_file is not None else None
            ),
            "seed": self.seed,
            "fanout": self.fanout.to_dict() if self.fanout is not None else None,
            "service": self.service.to_dict() if self.service is not None else None,
            "rate": self.rate.to_dict() if self.rate is not None else None,
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)

    def summary(self) -> str:
        """Generate configuration summary string.

        Returns:
            Human-readable configuration summary.
        """
        lines = [
            "CLIENT CONFIGURATION",
            "=" * 60,
            "",
            "SERVERS",
            "-" * 30,
        ]
        for i, server in enumerate(self.servers):
            lines.append(f"   Server[{i}]: {server.address}, Port: {server.port}")
        lines.extend(
            [
                "",
                "WORKLOAD",
                "-" * 30,
                f"   Network Load: {self.load_mbps:.2f} Mbps",
                f"   Number of Requests: {self.request_total_count}",
                f"   Request Size Distribution: {self.size_dist_file}",
                f"   Seed: {self.seed if self.seed is not None else 'unset'}",
            ]
        )
        for name, dist in self.distributions.items():
            lines.extend(["", name.upper(), "-" * 30])
            if dist is None:
                lines.append("   (released)")
                continue
            unit = "Mbps" if name == "rate" else ""
            for entry in dist:
                lines.append(f"   {entry.value}{unit}, Prob: {entry.weight}")
            lines.append(f"   Total weight: {dist.weight_total}")
        lines.extend(["", "=" * 60])

        return "\n".join(lines)
