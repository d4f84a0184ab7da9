"""Command-line entry point.

Usage::

    xcscaffold Acme -o ./Acme
    xcscaffold Acme -o ./Acme --bundle-id com.acme.app --deployment-target 18.0
    xcscaffold --values acme.yaml --dry-run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from xcscaffold import __version__
from xcscaffold.config import Config, load_values_file
from xcscaffold.errors import ScaffoldError, WriteError
from xcscaffold.scaffolder.engine import PlannedEntry
from xcscaffold.scaffolder.generator import ProjectConfig, ProjectGenerator
from xcscaffold.scaffolder.settings import BuildSettings
from xcscaffold.utils import (
    build_path_tree,
    console,
    format_duration,
    print_error,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
)

# CLI option dest -> values-file key
_VALUE_KEYS = (
    "project_name",
    "output_path",
    "bundle_identifier",
    "feature_module_name",
    "display_name",
    "marketing_version",
    "current_project_version",
    "deployment_target",
    "template_dir",
)

_BUILD_SETTING_KEYS = (
    "display_name",
    "marketing_version",
    "current_project_version",
    "deployment_target",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xcscaffold",
        description="Generate a new iOS app project from the placeholder template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  xcscaffold Acme -o ./Acme\n"
            "  xcscaffold Acme -o ./Acme --bundle-id com.acme.app\n"
            "  xcscaffold --values acme.yaml --dry-run\n"
        ),
    )
    parser.add_argument("project_name", nargs="?", default=None, help="Project name, e.g. Acme")
    parser.add_argument("--output", "-o", dest="output_path", default=None, help="Output directory")
    parser.add_argument(
        "--bundle-id",
        dest="bundle_identifier",
        default=None,
        help="Bundle identifier (default: com.example.<name>)",
    )
    parser.add_argument(
        "--feature-module",
        dest="feature_module_name",
        default=None,
        help="Swift Package feature module (default: <name>Feature)",
    )
    parser.add_argument("--display-name", default=None, help="Home-screen display name")
    parser.add_argument("--marketing-version", default=None, help="MARKETING_VERSION, e.g. 1.0")
    parser.add_argument(
        "--current-project-version", default=None, help="CURRENT_PROJECT_VERSION (build number)"
    )
    parser.add_argument("--deployment-target", default=None, help="Minimum iOS version, e.g. 17.0")
    parser.add_argument(
        "--template",
        dest="template_dir",
        default=None,
        help="Template directory (default: bundled iOS template)",
    )
    parser.add_argument("--values", default=None, help="JSON or YAML file with the values above")
    parser.add_argument("--dry-run", action="store_true", help="Show the output tree without writing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print every written entry")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``xcscaffold`` / ``python -m xcscaffold.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        values = _collect_values(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print_error(f"Error: cannot read values file: {exc}")
        sys.exit(1)

    if not values.get("output_path"):
        print_error("Error: an output directory is required (--output)")
        sys.exit(1)

    settings = Config.from_env()
    if values.get("template_dir"):
        settings.template_dir = Path(values["template_dir"])
    if args.verbose:
        settings.verbose = True

    config = ProjectConfig(
        project_name=values.get("project_name") or "",
        output_path=Path(values["output_path"]),
        bundle_identifier=values.get("bundle_identifier"),
        feature_module_name=values.get("feature_module_name"),
        build_settings=BuildSettings(**{k: values.get(k) for k in _BUILD_SETTING_KEYS}),
    )
    generator = ProjectGenerator(config, settings)

    try:
        if args.dry_run:
            _run_dry(generator)
        else:
            _run(generator, settings.verbose)
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        if isinstance(exc, WriteError) and exc.output_path is not None:
            print_warning(f"Partial output left at {exc.output_path}; remove it before retrying.")
        sys.exit(1)


def _run(generator: ProjectGenerator, verbose: bool) -> None:
    on_entry = None
    if verbose:

        def on_entry(entry: PlannedEntry) -> None:
            suffix = "/" if entry.is_dir else ""
            note = " (binary)" if entry.is_binary else ""
            print_step(f"  {entry.output_path}{suffix}{note}")

    result = generator.generate(on_entry=on_entry)
    print_summary_table(
        {
            "Project": result.project_name,
            "Output": str(result.output_path),
            "Bundle identifier": result.placeholders.get("BundleIdentifier", ""),
            "Feature module": result.placeholders.get("FeatureModuleName", ""),
            "Directories": str(result.directories),
            "Files": f"{result.files} ({result.binary_files} binary)",
            "Replacements": str(result.replacements),
            "Duration": format_duration(result.duration_seconds),
        },
        title="Scaffold Summary",
    )
    print_success(f"Created {result.project_name} at {result.output_path}")


def _run_dry(generator: ProjectGenerator) -> None:
    plan = generator.preview()
    console.print(
        build_path_tree(str(generator.config.output_path), [entry.output_path for entry in plan])
    )
    print_warning("Dry run: nothing was written.")


def _collect_values(args: argparse.Namespace) -> dict[str, Any]:
    """Merge the values file (if any) with command-line options.

    Command-line options win.  Scalar values from the file are converted to
    strings so YAML numbers like ``1.0`` are accepted as versions.
    """
    values: dict[str, Any] = {}
    if args.values:
        raw = load_values_file(args.values)
        unknown = sorted(set(raw) - set(_VALUE_KEYS))
        if unknown:
            raise ValueError(f"unknown keys {unknown} (allowed: {list(_VALUE_KEYS)})")
        values = {k: (None if v is None else str(v)) for k, v in raw.items()}

    for key in _VALUE_KEYS:
        cli_value = getattr(args, key, None)
        if cli_value is not None:
            values[key] = cli_value
    return values


if __name__ == "__main__":
    main()
