"""Read-only access to a template tree on disk.

``TemplateStore`` walks a template directory and returns its entries in a
stable, parents-first order with the raw bytes of every file.  Binary files
are flagged so the engine copies them untouched.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from xcscaffold.config import Config
from xcscaffold.errors import NotFoundError

_SNIFF_BYTES = 8192


@dataclass(frozen=True)
class TemplateEntry:
    """One directory or file of the template tree.

    ``relative_path`` is POSIX-style and relative to the template root.
    ``content`` is empty for directories.
    """

    relative_path: str
    is_dir: bool
    content: bytes = b""
    is_binary: bool = False
    mode: int = 0o644


class TemplateStore:
    """Ordered view over a template directory.

    Directories are listed before their contents and siblings are sorted by
    name, so two listings of the same tree are identical.
    """

    def __init__(self, root: str | Path, config: Optional[Config] = None) -> None:
        self.root = Path(root)
        self.config = config or Config()

    def list_entries(self) -> list[TemplateEntry]:
        """Return every entry of the template tree.

        Raises:
            NotFoundError: If the root is missing or not a directory, if a
                file inside it cannot be read, or if it contains a symlinked
                directory.
        """
        if not self.root.exists():
            raise NotFoundError("template root does not exist", path=self.root)
        if not self.root.is_dir():
            raise NotFoundError("template root is not a directory", path=self.root)

        entries: list[TemplateEntry] = []
        self._walk(self.root, entries)
        return entries

    def _walk(self, directory: Path, entries: list[TemplateEntry]) -> None:
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise NotFoundError(f"cannot read directory: {exc}", path=directory) from exc

        ignored = set(self.config.ignore_names)
        for child in children:
            if child.name in ignored:
                continue
            rel = child.relative_to(self.root).as_posix()
            if child.is_symlink() and child.is_dir():
                raise NotFoundError("symlinked directories are not supported in templates", path=child)
            if child.is_dir():
                entries.append(TemplateEntry(relative_path=rel, is_dir=True, mode=_mode(child)))
                self._walk(child, entries)
            elif child.is_file():
                entries.append(self._read_file(child, rel))

    def _read_file(self, path: Path, rel: str) -> TemplateEntry:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise NotFoundError(f"cannot read template file: {exc}", path=path) from exc
        return TemplateEntry(
            relative_path=rel,
            is_dir=False,
            content=data,
            is_binary=self.is_binary(path, data),
            mode=_mode(path),
        )

    def is_binary(self, path: Path, data: bytes) -> bool:
        """Decide whether *data* must be copied without substitution.

        Known binary suffixes win; otherwise a NUL byte in the first 8 KiB or
        content that does not decode with the configured encoding marks the
        file as binary.
        """
        if self.config.is_binary_suffix(path.suffix):
            return True
        if b"\x00" in data[:_SNIFF_BYTES]:
            return True
        try:
            data.decode(self.config.encoding)
        except UnicodeDecodeError:
            return True
        return False


def _mode(path: Path) -> int:
    return stat.S_IMODE(os.stat(path).st_mode)
