"""Shared pytest fixtures for the xcscaffold test suite.

Provides reusable fixtures for:
- A small throwaway template tree (text, binary and executable files)
- Resolved placeholder values for the default token set
- The bundled iOS template directory
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from xcscaffold.config import DEFAULT_TEMPLATE_DIR, Config
from xcscaffold.scaffolder.placeholders import PlaceholderResolver, ResolvedPlaceholders

# NUL byte plus invalid UTF-8 plus an embedded token that must survive untouched.
BINARY_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00MyProject\xff\xfe com.example.MyProject"


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------


def _write(root: Path, rel: str, content: str | bytes) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A minimal template tree using all three placeholder tokens."""
    root = tmp_path / "template"
    _write(
        root,
        "MyProject.xcworkspace/contents.xcworkspacedata",
        '<Workspace version = "1.0">\n'
        '   <FileRef location = "group:MyProjectPackage"></FileRef>\n'
        "</Workspace>\n",
    )
    _write(
        root,
        "MyProject/MyProjectApp.swift",
        "import SwiftUI\nimport MyProjectFeature\n\n@main\nstruct MyProjectApp: App {}\n",
    )
    _write(root, "MyProject/Icon.png", BINARY_BYTES)
    _write(
        root,
        "MyProjectPackage/Sources/MyProjectFeature/ContentView.swift",
        'public struct ContentView { let title = "MyProject" }\n',
    )
    _write(
        root,
        "MyProjectPackage/Package.swift",
        'let package = Package(\n    name: "MyProjectFeature",\n    platforms: [.iOS(.v17)]\n)\n',
    )
    _write(root, "MyProjectUITests/MyProjectUITests.swift", "final class MyProjectUITests {}\n")
    _write(
        root,
        "Config/Shared.xcconfig",
        "PRODUCT_NAME = MyProject\n"
        "PRODUCT_DISPLAY_NAME = MyProject\n"
        "PRODUCT_BUNDLE_IDENTIFIER = com.example.MyProject\n"
        "MARKETING_VERSION = 1.0\n"
        "CURRENT_PROJECT_VERSION = 1\n"
        "IPHONEOS_DEPLOYMENT_TARGET = 17.0\n",
    )
    script = _write(root, "scripts/bootstrap.sh", "#!/bin/sh\necho MyProject\n")
    os.chmod(script, 0o755)
    _write(root, ".DS_Store", b"\x00\x00\x00\x01Bud1")
    return root


@pytest.fixture
def binary_bytes() -> bytes:
    return BINARY_BYTES


@pytest.fixture
def empty_template_dir(tmp_path: Path) -> Path:
    root = tmp_path / "empty-template"
    root.mkdir()
    return root


@pytest.fixture
def bundled_template_dir() -> Path:
    """The iOS template shipped with the package."""
    assert DEFAULT_TEMPLATE_DIR.is_dir(), f"bundled template missing at {DEFAULT_TEMPLATE_DIR}"
    return DEFAULT_TEMPLATE_DIR


@pytest.fixture
def settings(template_dir: Path) -> Config:
    """Config pointing at the throwaway template."""
    return Config(template_dir=template_dir)


# ---------------------------------------------------------------------------
# Placeholder values
# ---------------------------------------------------------------------------


@pytest.fixture
def acme_values() -> dict[str, str]:
    return {
        "ProjectName": "Acme",
        "BundleIdentifier": "com.acme.ios",
        "FeatureModuleName": "AcmeFeature",
    }


@pytest.fixture
def acme_placeholders(acme_values: dict[str, str]) -> ResolvedPlaceholders:
    return PlaceholderResolver().resolve(acme_values)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Output location that does not exist yet."""
    return tmp_path / "out" / "Acme"
