import os
from pathlib import Path

import pytest
import yaml

from save_archiver.core.models import SaveFileSpec

NS = 1_000_000_000


@pytest.fixture
def set_mtime():
    """Pin both timestamps of a file to whole seconds."""
    def _set(path: Path, seconds: int) -> None:
        os.utime(path, ns=(seconds * NS, seconds * NS))
    return _set


@pytest.fixture
def save_spec() -> SaveFileSpec:
    return SaveFileSpec(base_name="DDDA", extension=".sav")


@pytest.fixture
def save_dir(tmp_path: Path) -> Path:
    """A save directory holding a live save with content ``A``."""
    directory = tmp_path / "remote"
    directory.mkdir()
    (directory / "DDDA.sav").write_bytes(b"A")
    return directory


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a YAML config file and return its path."""
    def _write(data: dict, name: str = "config.yaml") -> str:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def archiver_config(write_config, save_dir: Path, tmp_path: Path) -> str:
    """Config that points discovery at ``save_dir`` only."""
    return write_config({
        'monitoring': {'poll_interval_seconds': 0.02},
        'discovery': {
            'steam_path': str(tmp_path / "no-steam"),
            'save_directories': [str(save_dir)],
        },
    })
