from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, TextIO

_ENCODING = "utf-8"


class SourceLoader(Protocol):
    def load(self, path: str, *, base_dir: Path | None) -> tuple[str, str]:
        """Return ``(filename, text)`` for ``path``; raise OSError when unreadable."""
        ...


def read_source(path: str | Path) -> str:
    with open(path, encoding=_ENCODING, newline="") as handle:
        return handle.read()


def open_output(path: str | Path) -> TextIO:
    return open(path, "w", encoding=_ENCODING, newline="")


def source_dir(filename: str) -> Path | None:
    if filename.startswith("<") and filename.endswith(">"):
        return None
    return Path(filename).parent


class FileLoader:
    """Load sources from disk.

    Relative paths are tried against the including file's directory, then
    each include directory, then the working directory.
    """

    def __init__(self, include_dirs: Sequence[str] = ()) -> None:
        self._include_dirs = tuple(Path(path) for path in include_dirs)

    def resolve(self, path: str, *, base_dir: Path | None) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        search_roots = [Path() if base_dir is None else base_dir, *self._include_dirs]
        if base_dir is not None:
            search_roots.append(Path())
        for root in search_roots:
            resolved = root / candidate
            if resolved.is_file():
                return resolved
        return search_roots[0] / candidate

    def load(self, path: str, *, base_dir: Path | None) -> tuple[str, str]:
        resolved = self.resolve(path, base_dir=base_dir)
        return str(resolved), read_source(resolved)
