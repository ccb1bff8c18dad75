"""Build constraint evaluation for Go source files.

Two kinds of constraints decide whether a file belongs to the build:
``//go:build`` lines in the file header, and ``_GOOS`` / ``_GOARCH``
suffixes in the file name.
"""

import platform
import re
import sys
from typing import FrozenSet, Iterable, List, Optional

from .errors import LoadError


KNOWN_OS = {
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
    "ios", "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris",
    "wasip1", "windows", "zos",
}
KNOWN_ARCH = {
    "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be",
    "loong64", "mips", "mipsle", "mips64", "mips64le", "mips64p32",
    "mips64p32le", "ppc", "ppc64", "ppc64le", "riscv", "riscv64", "s390",
    "s390x", "sparc", "sparc64", "wasm",
}
UNIX_OS = {
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
    "ios", "linux", "netbsd", "openbsd", "solaris",
}

# Release tags go1.1 ... go1.N are all satisfied by a current toolchain.
GO_MINOR_RELEASE = 23

_MACHINE_TO_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

_TOKEN_RE = re.compile(r"\s*(\(|\)|!|&&|\|\||[A-Za-z0-9_.]+)")


def host_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return re.sub(r"\d+$", "", sys.platform)


def host_arch() -> str:
    return _MACHINE_TO_ARCH.get(platform.machine().lower(), "amd64")


def default_tags(extra: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """
    Return the tag set a build on this host would satisfy.

    Args:
        extra: Additional user tags (like ``go build -tags``).

    Returns:
        GOOS, GOARCH, ``unix`` where it applies, ``gc``, the release tags
        and the extra tags.
    """
    goos = host_os()
    tags = {goos, host_arch(), "gc"}
    if goos in UNIX_OS:
        tags.add("unix")
    tags.update(f"go1.{minor}" for minor in range(1, GO_MINOR_RELEASE + 1))
    if extra:
        tags.update(tag for tag in extra if tag)
    return frozenset(tags)


def find_build_constraint(source: str) -> Optional[str]:
    """Return the expression of the ``//go:build`` line in the file header."""
    in_block_comment = False
    for line in source.splitlines():
        stripped = line.strip()
        if in_block_comment:
            if "*/" in stripped:
                in_block_comment = False
            continue
        if not stripped:
            continue
        if stripped.startswith("//go:build"):
            rest = stripped[len("//go:build"):]
            if rest and not rest[0].isspace():
                continue
            return rest.strip()
        if stripped.startswith("//"):
            continue
        if stripped.startswith("/*"):
            in_block_comment = "*/" not in stripped[2:]
            continue
        # The package clause (or any code) ends the header.
        break
    return None


class _ConstraintParser:
    def __init__(self, expr: str, tags: FrozenSet[str]):
        self.expr = expr
        self.tags = tags
        self.tokens = self._tokenize(expr)
        self.index = 0

    def _tokenize(self, expr: str) -> List[str]:
        tokens: List[str] = []
        pos = 0
        expr = expr.rstrip()
        while pos < len(expr):
            match = _TOKEN_RE.match(expr, pos)
            if not match:
                raise LoadError(f"malformed build constraint: {self.expr!r}")
            tokens.append(match.group(1))
            pos = match.end()
        return tokens

    def _peek(self) -> Optional[str]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise LoadError(f"malformed build constraint: {self.expr!r}")
        self.index += 1
        return token

    def parse(self) -> bool:
        result = self._or()
        if self._peek() is not None:
            raise LoadError(f"malformed build constraint: {self.expr!r}")
        return result

    def _or(self) -> bool:
        result = self._and()
        while self._peek() == "||":
            self._next()
            right = self._and()
            result = result or right
        return result

    def _and(self) -> bool:
        result = self._not()
        while self._peek() == "&&":
            self._next()
            right = self._not()
            result = result and right
        return result

    def _not(self) -> bool:
        if self._peek() == "!":
            self._next()
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        token = self._next()
        if token == "(":
            result = self._or()
            if self._next() != ")":
                raise LoadError(f"malformed build constraint: {self.expr!r}")
            return result
        if token in (")", "&&", "||", "!"):
            raise LoadError(f"malformed build constraint: {self.expr!r}")
        return token in self.tags


def eval_constraint(expr: str, tags: FrozenSet[str]) -> bool:
    """Evaluate a ``//go:build`` expression against a tag set."""
    if not expr.strip():
        raise LoadError("empty build constraint")
    return _ConstraintParser(expr, tags).parse()


def source_matches(source: str, tags: FrozenSet[str]) -> bool:
    expr = find_build_constraint(source)
    return expr is None or eval_constraint(expr, tags)


def file_name_matches(name: str, tags: FrozenSet[str]) -> bool:
    """
    Check the ``_GOOS``, ``_GOARCH`` and ``_GOOS_GOARCH`` file name suffixes.

    Args:
        name: Base name of the file, e.g. ``zerrors_linux_amd64.go``.
        tags: Active tag set.

    Returns:
        False if the name restricts the file to another platform.
    """
    stem = name[:-3] if name.endswith(".go") else name
    if stem.endswith("_test"):
        stem = stem[: -len("_test")]
    parts = stem.split("_")
    if len(parts) < 2:
        return True
    last = parts[-1]
    if len(parts) >= 3 and parts[-2] in KNOWN_OS and last in KNOWN_ARCH:
        return parts[-2] in tags and last in tags
    if last in KNOWN_OS or last in KNOWN_ARCH:
        return last in tags
    return True
