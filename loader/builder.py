"""Package loader that orchestrates discovery, parsing and type checking."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from model.syntax import File
from model.unit import CompilationUnit
from .constraints import default_tags, source_matches
from .discovery import is_test_file, iter_go_files
from .errors import LoadError
from .parser import parse_source
from .resolver import check_package


logger = logging.getLogger(__name__)


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"cannot read {path}: {e}") from e


def load_package(
    directory: Union[str, Path],
    include_tests: bool = False,
    build_tags: Optional[Iterable[str]] = None,
) -> Tuple[str, List[CompilationUnit]]:
    """
    Load the Go package in a directory.

    Args:
        directory: Package directory.
        include_tests: Include ``_test.go`` files of the package itself.
            Files of an external ``<name>_test`` package are never loaded.
        build_tags: Extra build tags on top of the host defaults.

    Returns:
        The package name and its compilation units in file name order.

    Raises:
        LoadError: If the directory does not hold exactly one package, or a
            file cannot be read or parsed.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise LoadError(f"{directory} is not a directory")

    tags = default_tags(build_tags)
    parsed: List[Tuple[Path, File]] = []
    for path in iter_go_files(directory, tags, include_tests=include_tests):
        source = _read_source(path)
        if not source_matches(source, tags):
            logger.debug("skipping %s: excluded by build constraint", path)
            continue
        parsed.append((path, parse_source(source, str(path))))

    if not parsed:
        raise LoadError(f"no Go files in {directory}")

    by_package: Dict[str, List[Tuple[Path, File]]] = {}
    for path, file in parsed:
        by_package.setdefault(file.package.name, []).append((path, file))

    if include_tests and len(by_package) > 1:
        for name in list(by_package):
            if name.endswith("_test") and all(is_test_file(path) for path, _ in by_package[name]):
                logger.debug("dropping external test package %s", name)
                del by_package[name]

    if len(by_package) != 1:
        names = ", ".join(sorted(by_package))
        raise LoadError(f"{len(by_package)} packages found ({names})")

    name, files = next(iter(by_package.items()))
    info, errors = check_package([file for _, file in files])
    for error in errors:
        logger.warning("%s", error)

    logger.debug("loaded package %s: %d files, %d definitions", name, len(files), len(info))
    units = [CompilationUnit(path=path, file=file, info=info) for path, file in files]
    return name, units
