"""Shared pytest fixtures for all tests."""

import os
import pytest

import core

MB = 1024 * 1024


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep log files and the save root inside the test's tmp_path."""
    monkeypatch.setattr(core, "LOG_DIR", str(tmp_path / "logs"))
    save_root = tmp_path / "saved"
    save_root.mkdir()
    monkeypatch.setattr(core, "SAVE_DIR", str(save_root))
    return save_root


def make_file(path, size):
    with open(path, "wb") as f:
        f.write(os.urandom(size))
    return str(path)


@pytest.fixture
def large_file(tmp_path):
    """10 MiB of random bytes."""
    return make_file(tmp_path / "sample.bin", 10 * MB)


@pytest.fixture
def uneven_file(tmp_path):
    """3 MiB plus a 1234 byte tail."""
    return make_file(tmp_path / "uneven.bin", 3 * MB + 1234)


@pytest.fixture
def small_file(tmp_path):
    """1 MiB, below the chunking threshold."""
    return make_file(tmp_path / "small.bin", 1 * MB)
