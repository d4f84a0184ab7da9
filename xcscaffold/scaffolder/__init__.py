"""xcscaffold scaffolder -- turns the template tree into a concrete project.

Quick usage::

    from xcscaffold.scaffolder import ProjectConfig, ProjectGenerator

    config = ProjectConfig(project_name="Acme", output_path="/tmp/Acme")
    result = ProjectGenerator(config).generate()
"""

from xcscaffold.scaffolder.engine import PlannedEntry, SubstitutionEngine
from xcscaffold.scaffolder.generator import (
    ProjectConfig,
    ProjectGenerator,
    ScaffoldResult,
    default_bundle_identifier,
    generate_project,
)
from xcscaffold.scaffolder.placeholders import (
    DEFAULT_PLACEHOLDERS,
    Placeholder,
    PlaceholderResolver,
    PlaceholderSet,
    ResolvedPlaceholders,
)
from xcscaffold.scaffolder.settings import BuildSettings
from xcscaffold.scaffolder.store import TemplateEntry, TemplateStore

__all__ = [
    "BuildSettings",
    "DEFAULT_PLACEHOLDERS",
    "Placeholder",
    "PlaceholderResolver",
    "PlaceholderSet",
    "PlannedEntry",
    "ProjectConfig",
    "ProjectGenerator",
    "ResolvedPlaceholders",
    "ScaffoldResult",
    "SubstitutionEngine",
    "TemplateEntry",
    "TemplateStore",
    "default_bundle_identifier",
    "generate_project",
]
