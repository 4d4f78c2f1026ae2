"""Configuration front-end for a network workload-generation client.

Parses line-oriented client configuration files describing target servers,
offered load, request volume and weighted parameter distributions into
read-only tables for a flow-generation engine.
"""

__version__ = "0.1.0"

# Core classes and utilities
from .config import ClientConfig, Server
from .distribution import WeightedDistribution, WeightedEntry
from .errors import (
    AllocationError,
    CardinalityError,
    ConfigError,
    ConfigFileError,
    MalformedFieldError,
    SchemaError,
)
from .parser import parse_config

__all__ = [
    "AllocationError",
    "CardinalityError",
    "ClientConfig",
    "ConfigError",
    "ConfigFileError",
    "MalformedFieldError",
    "SchemaError",
    "Server",
    "WeightedDistribution",
    "WeightedEntry",
    "__version__",
    "parse_config",
]
