"""
Shared pytest fixtures for strata tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import strata.value as value

# =============================================================================
# Configuration Files
# =============================================================================


@_pytest.fixture
def config_dir(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """
    Empty directory that is also the working directory.

    File origins are rendered relative to the working directory, so tests
    that check origin labels see plain file names.
    """
    directory = tmp_path / "config"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


@_pytest.fixture
def write_config(config_dir: _pathlib.Path) -> _typing.Callable[[str, str], _pathlib.Path]:
    """
    Factory writing a file into config_dir.

    Usage:
        def test_something(write_config):
            path = write_config("app.yaml", "debug: true\\n")
    """

    def _write(name: str, content: str) -> _pathlib.Path:
        path = config_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


# =============================================================================
# Values
# =============================================================================


@_pytest.fixture
def origin() -> value.Origin:
    """A generic origin for hand-built trees."""
    return value.Origin("test")


@_pytest.fixture
def server_tree(origin: value.Origin) -> value.Value:
    """A small tree exercising tables, arrays and every scalar kind."""
    return value.Value.from_python(
        {
            "server": {"host": "localhost", "port": 8080, "debug": False},
            "servers": [{"name": "x"}, {"name": "y"}],
            "ratio": 0.5,
            "empty": None,
        },
        origin,
    )
