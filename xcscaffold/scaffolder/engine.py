"""Placeholder substitution over a template tree.

The engine works in two steps.  :meth:`SubstitutionEngine.plan` rewrites
names and text contents in memory and checks that the renamed tree has no
collisions; :meth:`SubstitutionEngine.materialize` writes the plan to disk in
template order and aborts on the first I/O failure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Optional

from xcscaffold.errors import WriteError
from xcscaffold.scaffolder.placeholders import ResolvedPlaceholders
from xcscaffold.scaffolder.settings import (
    BuildSettings,
    apply_package_manifest,
    apply_xcconfig,
)
from xcscaffold.scaffolder.store import TemplateEntry


@dataclass(frozen=True)
class PlannedEntry:
    """A template entry after substitution, ready to be written."""

    source_path: str
    output_path: str
    is_dir: bool
    content: bytes = b""
    is_binary: bool = False
    mode: int = 0o644
    replacements: int = 0


class SubstitutionEngine:
    """Replaces placeholder tokens in paths and text contents.

    All tokens are matched in one pass by a single alternation ordered
    longest-first, so ``com.example.MyProject`` wins over ``MyProject`` and a
    replacement value is never scanned again.
    """

    def __init__(
        self,
        placeholders: ResolvedPlaceholders,
        build_settings: Optional[BuildSettings] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.placeholders = placeholders
        self.build_settings = build_settings or BuildSettings()
        self.encoding = encoding
        # ResolvedPlaceholders already iterates longest-first.
        self._pattern: Optional[re.Pattern[str]] = None
        if placeholders:
            self._pattern = re.compile("|".join(re.escape(token) for token in placeholders))

    # -- Text / path substitution ------------------------------------------

    def substitute_text(self, text: str) -> tuple[str, int]:
        """Return ``(new_text, number_of_replacements)``."""
        if self._pattern is None:
            return text, 0
        return self._pattern.subn(lambda m: self.placeholders[m.group(0)], text)

    def substitute_path(self, relative_path: str) -> str:
        """Apply substitution to every component of a POSIX relative path."""
        parts = [self.substitute_text(part)[0] for part in PurePosixPath(relative_path).parts]
        return PurePosixPath(*parts).as_posix()

    # -- Planning ----------------------------------------------------------

    def plan(self, entries: list[TemplateEntry]) -> list[PlannedEntry]:
        """Compute the output tree without touching the disk.

        Output paths are compared case-insensitively, as on the default macOS
        file system.

        Raises:
            WriteError: If two template entries map to the same output path.
        """
        planned: list[PlannedEntry] = []
        seen: dict[str, str] = {}
        for entry in entries:
            out_path = self.substitute_path(entry.relative_path)
            key = out_path.casefold()
            if key in seen:
                raise WriteError(
                    f"{entry.relative_path!r} and {seen[key]!r} both map to the same output path",
                    path=out_path,
                )
            seen[key] = entry.relative_path
            planned.append(self._plan_entry(entry, out_path))
        return planned

    def _plan_entry(self, entry: TemplateEntry, out_path: str) -> PlannedEntry:
        if entry.is_dir:
            return PlannedEntry(
                source_path=entry.relative_path,
                output_path=out_path,
                is_dir=True,
                mode=entry.mode,
            )
        if entry.is_binary:
            return PlannedEntry(
                source_path=entry.relative_path,
                output_path=out_path,
                is_dir=False,
                content=entry.content,
                is_binary=True,
                mode=entry.mode,
            )

        text = entry.content.decode(self.encoding)
        new_text, count = self.substitute_text(text)
        new_text = self._apply_build_settings(out_path, new_text)
        return PlannedEntry(
            source_path=entry.relative_path,
            output_path=out_path,
            is_dir=False,
            content=new_text.encode(self.encoding),
            mode=entry.mode,
            replacements=count,
        )

    def _apply_build_settings(self, out_path: str, text: str) -> str:
        if self.build_settings.is_empty():
            return text
        name = PurePosixPath(out_path).name
        if name.endswith(".xcconfig"):
            return apply_xcconfig(text, self.build_settings)
        if name == "Package.swift":
            return apply_package_manifest(text, self.build_settings)
        return text

    # -- Materialisation ---------------------------------------------------

    def materialize(
        self,
        plan: list[PlannedEntry],
        output_path: str | Path,
        on_entry: Optional[Callable[[PlannedEntry], None]] = None,
    ) -> Path:
        """Write *plan* under *output_path*.

        The output directory may be absent or empty.  Entries are written in
        plan order; the first failure raises ``WriteError`` carrying both the
        failing path and the partially written output root.

        Args:
            plan: Entries produced by :meth:`plan`.
            output_path: Destination root.
            on_entry: Optional callback invoked after each entry is written.

        Returns:
            The output root.
        """
        root = Path(output_path)
        _check_output_root(root)

        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"cannot create output directory: {exc}", path=root, output_path=root) from exc

        for entry in plan:
            target = root / entry.output_path
            try:
                _write_entry(target, entry)
            except OSError as exc:
                raise WriteError(str(exc), path=target, output_path=root) from exc
            if on_entry is not None:
                on_entry(entry)

        return root


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _check_output_root(root: Path) -> None:
    if not root.exists():
        return
    if not root.is_dir():
        raise WriteError("output path exists and is not a directory", path=root)
    if any(root.iterdir()):
        raise WriteError("output directory already exists and is not empty", path=root)


def _write_entry(target: Path, entry: PlannedEntry) -> None:
    if entry.is_dir:
        target.mkdir(parents=True, exist_ok=True)
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(entry.content)
    target.chmod(entry.mode)
