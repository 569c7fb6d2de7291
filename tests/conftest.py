"""Shared pytest fixtures for NodeSelect tests."""
import os
from pathlib import Path
from typing import Any, Dict, List

import pytest
import yaml

from nodeselect.core.node import NodeEntry
from nodeselect.infrastructure import logger as logger_module


@pytest.fixture
def web_node() -> NodeEntry:
    """A production web node running unix."""
    return NodeEntry(
        nodename="web01",
        hostname="web01.example.com",
        tags={"prod", "web"},
        os_family="unix",
        os_arch="x86_64",
        os_name="Linux",
        os_version="6.1",
        attributes={"env": "production", "region": "eu-west"},
    )


@pytest.fixture
def inventory() -> List[NodeEntry]:
    """A small mixed inventory, in a fixed order."""
    return [
        NodeEntry(
            "web01",
            hostname="web01.example.com",
            tags={"web", "prod"},
            os_family="unix",
            attributes={"env": "production"},
        ),
        NodeEntry(
            "web02",
            hostname="web02.example.com",
            tags={"web", "staging"},
            os_family="unix",
            attributes={"env": "staging"},
        ),
        NodeEntry(
            "db01",
            hostname="db01.example.com",
            tags={"db", "prod"},
            os_family="unix",
            attributes={"env": "production"},
        ),
        NodeEntry(
            "win01",
            hostname="win01.example.com",
            tags={"web", "prod"},
            os_family="windows",
            attributes={"env": "production"},
        ),
    ]


@pytest.fixture
def resources_document() -> Dict[str, Any]:
    """Node inventory in the YAML resource mapping format."""
    return {
        "web01": {
            "hostname": "web01.example.com",
            "tags": "web, prod",
            "osFamily": "unix",
            "osArch": "x86_64",
            "osName": "Linux",
            "osVersion": "6.1",
            "env": "production",
        },
        "db01": {
            "hostname": "db01.example.com",
            "tags": ["db", "prod"],
            "osFamily": "unix",
            "env": "production",
        },
        "win01": {
            "hostname": "win01.example.com",
            "tags": "web,prod",
            "osFamily": "windows",
            "env": "production",
        },
    }


@pytest.fixture
def resources_file(tmp_path: Path, resources_document: Dict[str, Any]) -> Path:
    """Write the resource document to a YAML file."""
    path = tmp_path / "resources.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(resources_document, f)
    return path


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample NodeSelect configuration."""
    return {
        "nodeselect": {
            "selection": {
                "include": {"tags": "prod"},
                "exclude": {"os-family": "windows"},
                "exclude_precedence": True,
                "thread_count": 2,
            },
            "logging": {"level": "WARNING"},
        }
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = tmp_path / "nodeselect.yaml"
    with open(config_path, "w") as f:
        yaml.safe_dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Hide NODESELECT_* variables from the host environment."""
    for key in list(os.environ):
        if key.startswith("NODESELECT_"):
            monkeypatch.delenv(key)
    yield


@pytest.fixture(autouse=True)
def reset_loggers(monkeypatch):
    """Give every test a fresh logger registry."""
    monkeypatch.setattr(logger_module, "_loggers", {})
    monkeypatch.setattr(logger_module, "_default_level", logger_module.LogLevel.INFO)
    monkeypatch.setattr(logger_module, "_log_file", None)
    yield
