"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and produces a new iOS project from the template
tree: placeholder values are derived and validated, the template is listed,
substitution is planned in memory, and the plan is written to the output
directory.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from xcscaffold.config import Config
from xcscaffold.errors import ValidationError
from xcscaffold.scaffolder.engine import PlannedEntry, SubstitutionEngine
from xcscaffold.scaffolder.placeholders import (
    BUNDLE_IDENTIFIER,
    DEFAULT_PLACEHOLDERS,
    FEATURE_MODULE_NAME,
    PROJECT_NAME,
    PlaceholderResolver,
    PlaceholderSet,
    ResolvedPlaceholders,
)
from xcscaffold.scaffolder.settings import BuildSettings
from xcscaffold.scaffolder.store import TemplateStore

DEFAULT_BUNDLE_PREFIX = "com.example"


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ProjectConfig(BaseModel):
    """Pydantic model describing the project to scaffold.

    Only ``project_name`` and ``output_path`` are required; the bundle
    identifier and feature module name are derived from the project name when
    omitted.  Values are checked by :class:`PlaceholderResolver`, not here, so
    that every failure is reported as ``xcscaffold.errors.ValidationError``.
    """

    model_config = ConfigDict(extra="forbid")

    project_name: str = Field(..., description="App name, used for targets and file names")
    output_path: Path = Field(..., description="Directory the project is written into")
    bundle_identifier: Optional[str] = Field(
        default=None, description="Reverse-DNS bundle id (default: com.example.<name>)"
    )
    feature_module_name: Optional[str] = Field(
        default=None, description="Swift Package module name (default: <name>Feature)"
    )
    build_settings: BuildSettings = Field(default_factory=BuildSettings)

    def placeholder_values(self) -> dict[str, Optional[str]]:
        """Return placeholder values with defaults filled in."""
        name = self.project_name
        bundle_id = self.bundle_identifier
        if bundle_id is None:
            bundle_id = default_bundle_identifier(name)
        module = self.feature_module_name
        if module is None:
            module = f"{name.strip()}Feature" if name.strip() else ""
        return {
            PROJECT_NAME: name,
            BUNDLE_IDENTIFIER: bundle_id,
            FEATURE_MODULE_NAME: module,
        }


class ScaffoldResult(BaseModel):
    """Summary of a completed scaffolding run."""

    project_name: str
    output_path: Path
    directories: int = 0
    text_files: int = 0
    binary_files: int = 0
    replacements: int = 0
    duration_seconds: float = 0.0
    placeholders: dict[str, str] = Field(default_factory=dict)

    @property
    def files(self) -> int:
        return self.text_files + self.binary_files


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Drives resolver, store and engine in sequence.

    Validation (placeholders and build settings) happens before the template
    is read and long before anything is written, so invalid input never
    leaves an output directory behind.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: Optional[Config] = None,
        placeholder_set: PlaceholderSet = DEFAULT_PLACEHOLDERS,
    ) -> None:
        self.config = config
        self.settings = settings or Config()
        self.resolver = PlaceholderResolver(placeholder_set)
        self.store = TemplateStore(self.settings.template_dir, self.settings)

    # -- Public API --------------------------------------------------------

    def resolve(self) -> ResolvedPlaceholders:
        """Validate placeholder values and build settings.

        Raises:
            ValidationError: naming the offending placeholder or setting.
        """
        resolved = self.resolver.resolve(self.config.placeholder_values())
        self.config.build_settings.validate_values(self.resolver.placeholder_set.tokens())
        return resolved

    def preview(self) -> list[PlannedEntry]:
        """Return the planned output tree without writing anything."""
        engine = self._engine(self.resolve())
        return engine.plan(self.store.list_entries())

    def generate(
        self, on_entry: Optional[Callable[[PlannedEntry], None]] = None
    ) -> ScaffoldResult:
        """Generate the project.

        Args:
            on_entry: Optional callback invoked after each entry is written.

        Returns:
            A ``ScaffoldResult`` describing what was written.

        Raises:
            ValidationError: Before any output is written.
            NotFoundError: If the template cannot be read.
            WriteError: If the output cannot be written; ``output_path`` on
                the error is the partially written root, if any.
        """
        started = time.monotonic()

        # 1. Validate everything up front
        resolved = self.resolve()
        engine = self._engine(resolved)

        # 2. Read the template and plan the output in memory
        plan = engine.plan(self.store.list_entries())

        # 3. Write
        root = engine.materialize(plan, self.config.output_path, on_entry=on_entry)

        return _summarise(
            self.config.project_name.strip(),
            root,
            plan,
            resolved,
            time.monotonic() - started,
        )

    # -- Internals ---------------------------------------------------------

    def _engine(self, resolved: ResolvedPlaceholders) -> SubstitutionEngine:
        return SubstitutionEngine(
            resolved,
            build_settings=self.config.build_settings,
            encoding=self.settings.encoding,
        )


def generate_project(
    project_name: str,
    output_path: str | Path,
    *,
    bundle_identifier: Optional[str] = None,
    feature_module_name: Optional[str] = None,
    settings: Optional[Config] = None,
    **build_settings: Any,
) -> ScaffoldResult:
    """Convenience wrapper around :class:`ProjectGenerator`.

    Extra keyword arguments are passed to :class:`BuildSettings`
    (``display_name``, ``marketing_version``, ...).

    Raises:
        ValidationError: Also for unknown or mistyped keyword arguments.
    """
    try:
        config = ProjectConfig(
            project_name=project_name,
            output_path=Path(output_path),
            bundle_identifier=bundle_identifier,
            feature_module_name=feature_module_name,
            build_settings=BuildSettings(**build_settings),
        )
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc
    return ProjectGenerator(config, settings).generate()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def default_bundle_identifier(project_name: str) -> str:
    """Derive ``com.example.<name>`` from a project name.

    The name is lowercased and stripped of anything that is not a letter or
    digit, e.g. ``'My_App2'`` -> ``'com.example.myapp2'``.  An empty result
    yields an empty identifier so validation reports the project name.
    """
    slug = re.sub(r"[^a-z0-9]+", "", project_name.lower())
    if not slug:
        return ""
    return f"{DEFAULT_BUNDLE_PREFIX}.{slug}"


def _summarise(
    project_name: str,
    root: Path,
    plan: list[PlannedEntry],
    resolved: ResolvedPlaceholders,
    duration: float,
) -> ScaffoldResult:
    result = ScaffoldResult(
        project_name=project_name,
        output_path=root,
        duration_seconds=duration,
        placeholders=dict(resolved.values),
    )
    for entry in plan:
        if entry.is_dir:
            result.directories += 1
        elif entry.is_binary:
            result.binary_files += 1
        else:
            result.text_files += 1
        result.replacements += entry.replacements
    return result
