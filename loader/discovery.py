"""Source file discovery for a Go package directory."""

import logging
from pathlib import Path
from typing import FrozenSet, Iterator

from .constraints import file_name_matches


logger = logging.getLogger(__name__)

GO_EXTENSION = ".go"
TEST_SUFFIX = "_test.go"


def is_test_file(path: Path) -> bool:
    return path.name.endswith(TEST_SUFFIX)


def iter_go_files(
    directory: Path,
    tags: FrozenSet[str],
    include_tests: bool = False,
) -> Iterator[Path]:
    """
    Iterate over the Go source files of one package directory.

    Unlike a repository scan, a package is a single directory: sub-
    directories are other packages and are not visited.

    Args:
        directory: The package directory.
        tags: Active build tags, used for file name constraints.
        include_tests: Also yield ``_test.go`` files.

    Yields:
        Paths in file name order.
    """
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        logger.debug("cannot list %s: %s", directory, e)
        return

    for entry in entries:
        name = entry.name
        if entry.suffix != GO_EXTENSION or not entry.is_file():
            continue
        # The go tool ignores files starting with "_" or ".".
        if name.startswith(("_", ".")):
            logger.debug("ignoring %s", entry)
            continue
        if is_test_file(entry) and not include_tests:
            continue
        if not file_name_matches(name, tags):
            logger.debug("skipping %s: file name excludes this platform", entry)
            continue
        yield entry
