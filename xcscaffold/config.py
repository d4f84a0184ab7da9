"""xcscaffold configuration.

Typed configuration for the scaffolder.  Settings use Pydantic v2 models so
they are validated at construction time and can be serialised to/from JSON or
read from environment variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

# Bundled iOS template shipped as package data.
DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates" / "ios"

DEFAULT_BINARY_EXTENSIONS: list[str] = [
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".heic",
    ".pdf",
    ".ico",
    ".icns",
    ".ttf",
    ".otf",
    ".woff",
    ".woff2",
    ".zip",
    ".car",
    ".mp3",
    ".mp4",
    ".mov",
    ".wav",
]

DEFAULT_IGNORE_NAMES: list[str] = [
    ".DS_Store",
    ".git",
    "xcuserdata",
    "__pycache__",
]


class Config(BaseModel):
    """Global scaffolder configuration.

    Controls where the template is read from and how its files are
    classified.  Instances are created once by the CLI (or by callers of
    ``ProjectGenerator``) and passed down to the store and engine.
    """

    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    binary_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BINARY_EXTENSIONS),
        description="File suffixes that are always copied byte-for-byte",
    )
    ignore_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_NAMES),
        description="File or directory names skipped when reading the template",
    )
    encoding: str = Field(default="utf-8", description="Encoding of text template files")
    verbose: bool = Field(default=False, description="Print one line per written entry")

    def is_binary_suffix(self, suffix: str) -> bool:
        """Return ``True`` if *suffix* (e.g. ``".PNG"``) is a known binary type."""
        return suffix.lower() in {ext.lower() for ext in self.binary_extensions}

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            XCSCAFFOLD_TEMPLATE_DIR, XCSCAFFOLD_BINARY_EXTENSIONS (comma
            separated, added to the defaults), XCSCAFFOLD_IGNORE (comma
            separated, added to the defaults), XCSCAFFOLD_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("XCSCAFFOLD_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["XCSCAFFOLD_TEMPLATE_DIR"])

        extra_ext = _split_csv(os.environ.get("XCSCAFFOLD_BINARY_EXTENSIONS", ""))
        if extra_ext:
            normalised = [e if e.startswith(".") else f".{e}" for e in extra_ext]
            kwargs["binary_extensions"] = DEFAULT_BINARY_EXTENSIONS + normalised

        extra_ignore = _split_csv(os.environ.get("XCSCAFFOLD_IGNORE", ""))
        if extra_ignore:
            kwargs["ignore_names"] = DEFAULT_IGNORE_NAMES + extra_ignore

        verbose = os.environ.get("XCSCAFFOLD_VERBOSE", "").strip().lower()
        if verbose:
            kwargs["verbose"] = verbose in ("1", "true", "yes", "on")

        return cls(**kwargs)


def load_values_file(path: str | Path) -> dict[str, Any]:
    """Load scaffold values (project name, bundle id, ...) from JSON or YAML.

    The file must contain a top-level mapping.  Keys use the CLI option names
    with underscores, e.g. ``bundle_identifier`` or ``deployment_target``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not contain a mapping.
    """
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must contain a mapping, got {type(data).__name__}")
    return data


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]
