import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Dict, Union

import pytest

from loader.parser import parse_source
from loader.resolver import check_package
from model.unit import CompilationUnit
from scanner import Package, parse_package


Sources = Union[str, Dict[str, str]]


def _as_files(sources: Sources) -> Dict[str, str]:
    if isinstance(sources, str):
        return {"source.go": sources}
    return sources


@pytest.fixture
def write_package(tmp_path: Path) -> Callable[..., Path]:
    def _write_package(sources: Sources, name: str = "pkg") -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for filename, source in _as_files(sources).items():
            (directory / filename).write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        return directory

    return _write_package


@pytest.fixture
def load_package(write_package: Callable[..., Path]) -> Callable[..., Package]:
    def _load_package(sources: Sources, **kwargs: object) -> Package:
        return parse_package(write_package(sources), **kwargs)

    return _load_package


@pytest.fixture
def make_package() -> Callable[..., Package]:
    """Build a Package in memory, without touching the file system."""

    def _make_package(sources: Sources) -> Package:
        files = [
            parse_source(textwrap.dedent(source).lstrip(), filename)
            for filename, source in _as_files(sources).items()
        ]
        info, _ = check_package(files)
        units = [CompilationUnit(Path(f.filename), f, info) for f in files]
        return Package(files[0].package.name, units)

    return _make_package
