"""Pytest configuration and shared fixtures for flowgen tests."""

from pathlib import Path

import pytest

BASIC_CONFIG = """\
server 192.168.1.1 5001
server 192.168.1.2 5001
load 100Mbps
num_reqs 1000
req_size_dist conf/DCTCP_CDF.txt
"""

FULL_CONFIG = """\
server 10.0.0.1 5001
server 10.0.0.2 5002
server 10.0.0.3 5003
load 800Mbps
num_reqs 5000
req_size_dist conf/VL2_CDF.txt
fanout 1 30
fanout 4 70
service 0 50
service 32 50
rate 0Mbps 90
rate 500Mbps 10
"""


@pytest.fixture
def write_config(tmp_path):
    """Return a helper that writes configuration text to a temp file."""

    def _write(text: str, name: str = "client_config.txt") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def basic_config_file(write_config) -> Path:
    """Configuration with mandatory directives only."""
    return write_config(BASIC_CONFIG)


@pytest.fixture
def full_config_file(write_config) -> Path:
    """Configuration using every directive key."""
    return write_config(FULL_CONFIG)


@pytest.fixture
def client_config(full_config_file):
    """Parsed ClientConfig from the full configuration."""
    from flowgen.config import ClientConfig

    return ClientConfig.from_file(full_config_file, seed=7)
