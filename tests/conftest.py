"""Pytest configuration and fixtures for Clarity CLI tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from clarity_cli.schemas import ArchData, CallsData, StructureData
from clarity_cli.session import AppState
from helpers import SAMPLE_CLASSIFICATIONS


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Point the TOML config at a temp file and block real HTTP calls."""
    monkeypatch.setattr("clarity_cli.config_manager.CONFIG_FILE", tmp_path / "config.toml")

    def _no_network(*args, **kwargs):
        raise AssertionError("tests must not reach the network")

    monkeypatch.setattr("requests.post", _no_network)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_data_path() -> Path:
    """Path to the sample analyzer output."""
    return Path(__file__).parent / "fixtures" / "sample_data"


@pytest.fixture
def data_dir(temp_dir: Path, sample_data_path: Path) -> Path:
    """A writable copy of the sample data directory."""
    target = temp_dir / "data"
    shutil.copytree(sample_data_path, target)
    return target


@pytest.fixture
def structure_data(sample_data_path: Path) -> StructureData:
    return StructureData.model_validate_json((sample_data_path / "structure.json").read_text())


@pytest.fixture
def calls_data(sample_data_path: Path) -> CallsData:
    return CallsData.model_validate_json((sample_data_path / "calls.json").read_text())


@pytest.fixture
def arch_data(sample_data_path: Path) -> ArchData:
    return ArchData.model_validate_json((sample_data_path / "arch.json").read_text())


@pytest.fixture
def loaded_state(structure_data, calls_data, arch_data) -> AppState:
    state = AppState()
    state.set_structure(structure_data)
    state.set_calls(calls_data)
    state.set_arch(arch_data)
    return state


@pytest.fixture
def classifications_reply() -> str:
    return json.dumps(SAMPLE_CLASSIFICATIONS)
