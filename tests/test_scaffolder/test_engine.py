"""Tests for the substitution engine.

Covers:
- Longest-token-first text substitution
- Path renaming
- Planning (binary passthrough, collisions, build settings)
- Materialisation (output checks, permissions, write failures)
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from xcscaffold.errors import WriteError
from xcscaffold.scaffolder.engine import SubstitutionEngine
from xcscaffold.scaffolder.placeholders import ResolvedPlaceholders
from xcscaffold.scaffolder.settings import BuildSettings
from xcscaffold.scaffolder.store import TemplateEntry, TemplateStore

pytestmark = pytest.mark.unit

TOKENS = ("MyProject", "com.example.MyProject", "MyProjectFeature")


@pytest.fixture
def engine(acme_placeholders) -> SubstitutionEngine:
    return SubstitutionEngine(acme_placeholders)


# ---------------------------------------------------------------------------
# Text substitution
# ---------------------------------------------------------------------------


class TestSubstituteText:
    def test_replaces_project_name(self, engine):
        assert engine.substitute_text("struct MyProjectApp") == ("struct AcmeApp", 1)

    def test_bundle_identifier_wins_over_project_name(self, engine):
        text, count = engine.substitute_text("id = com.example.MyProject")
        assert text == "id = com.acme.ios"
        assert count == 1

    def test_feature_module_wins_over_project_name(self, engine):
        text, _ = engine.substitute_text("import MyProjectFeature")
        assert text == "import AcmeFeature"

    def test_mixed_occurrences(self, engine):
        text, count = engine.substitute_text(
            "MyProject / MyProjectFeature / com.example.MyProject.uitests / MyProjectUITests"
        )
        assert text == "Acme / AcmeFeature / com.acme.ios.uitests / AcmeUITests"
        assert count == 4

    def test_no_tokens(self, engine):
        assert engine.substitute_text("nothing here") == ("nothing here", 0)

    def test_replacement_not_rescanned(self):
        resolved = ResolvedPlaceholders({"AAA": "BBB", "BBB": "Zed"}, {"A": "BBB", "B": "Zed"})
        text, count = SubstitutionEngine(resolved).substitute_text("AAA BBB")
        assert text == "BBB Zed"
        assert count == 2

    def test_no_residual_tokens_in_text(self, engine):
        source = " ".join(TOKENS * 3) + " MyProjectMyProject"
        text, _ = engine.substitute_text(source)
        for token in TOKENS:
            assert token not in text


# ---------------------------------------------------------------------------
# Path substitution
# ---------------------------------------------------------------------------


class TestSubstitutePath:
    def test_each_component(self, engine):
        assert (
            engine.substitute_path("MyProjectPackage/Sources/MyProjectFeature/MyProjectApp.swift")
            == "AcmePackage/Sources/AcmeFeature/AcmeApp.swift"
        )

    def test_workspace(self, engine):
        assert engine.substitute_path("MyProject.xcworkspace") == "Acme.xcworkspace"

    def test_untouched(self, engine):
        assert engine.substitute_path("Config/Shared.xcconfig") == "Config/Shared.xcconfig"


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


class TestPlan:
    def test_plan_preserves_order(self, engine, template_dir):
        entries = TemplateStore(template_dir).list_entries()
        plan = engine.plan(entries)
        assert [p.source_path for p in plan] == [e.relative_path for e in entries]

    def test_binary_content_untouched(self, engine, template_dir, binary_bytes):
        plan = {p.source_path: p for p in engine.plan(TemplateStore(template_dir).list_entries())}
        icon = plan["MyProject/Icon.png"]
        assert icon.is_binary
        assert icon.content == binary_bytes
        assert icon.output_path == "Acme/Icon.png"
        assert icon.replacements == 0

    def test_text_content_substituted(self, engine, template_dir):
        plan = {p.source_path: p for p in engine.plan(TemplateStore(template_dir).list_entries())}
        app = plan["MyProject/MyProjectApp.swift"]
        assert app.output_path == "Acme/AcmeApp.swift"
        assert app.content.decode() == "import SwiftUI\nimport AcmeFeature\n\n@main\nstruct AcmeApp: App {}\n"
        assert app.replacements == 2

    def test_collision_detected(self, engine):
        entries = [
            TemplateEntry(relative_path="MyProject.txt", is_dir=False, content=b"a"),
            TemplateEntry(relative_path="Acme.txt", is_dir=False, content=b"b"),
        ]
        with pytest.raises(WriteError) as exc_info:
            engine.plan(entries)
        assert exc_info.value.path == "Acme.txt"

    def test_collision_ignores_case(self, engine):
        entries = [
            TemplateEntry(relative_path="MyProject", is_dir=True),
            TemplateEntry(relative_path="acme", is_dir=True),
        ]
        with pytest.raises(WriteError) as exc_info:
            engine.plan(entries)
        assert exc_info.value.path == "acme"

    def test_build_settings_applied_to_xcconfig(self, acme_placeholders, template_dir):
        engine = SubstitutionEngine(
            acme_placeholders,
            build_settings=BuildSettings(display_name="Acme Pro", marketing_version="2.0"),
        )
        plan = {p.output_path: p for p in engine.plan(TemplateStore(template_dir).list_entries())}
        xcconfig = plan["Config/Shared.xcconfig"].content.decode()
        assert "PRODUCT_NAME = Acme\n" in xcconfig
        assert "PRODUCT_DISPLAY_NAME = Acme Pro\n" in xcconfig
        assert "MARKETING_VERSION = 2.0\n" in xcconfig
        assert "PRODUCT_BUNDLE_IDENTIFIER = com.acme.ios\n" in xcconfig

    def test_deployment_target_applied_to_package_manifest(self, acme_placeholders, template_dir):
        engine = SubstitutionEngine(acme_placeholders, build_settings=BuildSettings(deployment_target="18.0"))
        plan = {p.output_path: p for p in engine.plan(TemplateStore(template_dir).list_entries())}
        manifest = plan["AcmePackage/Package.swift"].content.decode()
        assert 'platforms: [.iOS("18.0")]' in manifest
        assert 'name: "AcmeFeature"' in manifest


# ---------------------------------------------------------------------------
# Materialisation
# ---------------------------------------------------------------------------


class TestMaterialize:
    def test_writes_tree(self, engine, template_dir, output_dir, binary_bytes):
        plan = engine.plan(TemplateStore(template_dir).list_entries())
        root = engine.materialize(plan, output_dir)
        assert root == output_dir
        assert (output_dir / "Acme.xcworkspace" / "contents.xcworkspacedata").is_file()
        assert (output_dir / "AcmeUITests" / "AcmeUITests.swift").is_file()
        assert (output_dir / "Acme" / "Icon.png").read_bytes() == binary_bytes

    def test_preserves_executable_bit(self, engine, template_dir, output_dir):
        plan = engine.plan(TemplateStore(template_dir).list_entries())
        engine.materialize(plan, output_dir)
        assert (output_dir / "scripts" / "bootstrap.sh").stat().st_mode & 0o100

    def test_empty_existing_directory_is_accepted(self, engine, template_dir, output_dir):
        output_dir.mkdir(parents=True)
        plan = engine.plan(TemplateStore(template_dir).list_entries())
        engine.materialize(plan, output_dir)
        assert (output_dir / "Acme" / "AcmeApp.swift").exists()

    def test_non_empty_directory_rejected(self, engine, template_dir, output_dir):
        output_dir.mkdir(parents=True)
        (output_dir / "keep.txt").write_text("mine", encoding="utf-8")
        plan = engine.plan(TemplateStore(template_dir).list_entries())
        with pytest.raises(WriteError) as exc_info:
            engine.materialize(plan, output_dir)
        assert exc_info.value.path == output_dir
        assert exc_info.value.output_path is None
        assert sorted(p.name for p in output_dir.iterdir()) == ["keep.txt"]

    def test_output_is_a_file(self, engine, tmp_path):
        target = tmp_path / "file"
        target.write_text("x", encoding="utf-8")
        with pytest.raises(WriteError):
            engine.materialize([], target)

    def test_on_entry_callback(self, engine, template_dir, output_dir):
        plan = engine.plan(TemplateStore(template_dir).list_entries())
        seen = []
        engine.materialize(plan, output_dir, on_entry=seen.append)
        assert seen == plan

    def test_write_failure_aborts_and_reports_partial_output(self, engine, template_dir, output_dir):
        plan = engine.plan(TemplateStore(template_dir).list_entries())
        calls = {"n": 0}
        real_write_bytes = Path.write_bytes

        def flaky_write_bytes(self, data):
            calls["n"] += 1
            if calls["n"] == 2:
                raise PermissionError("disk says no")
            return real_write_bytes(self, data)

        with patch.object(Path, "write_bytes", flaky_write_bytes):
            with pytest.raises(WriteError) as exc_info:
                engine.materialize(plan, output_dir)

        err = exc_info.value
        assert err.output_path == output_dir
        assert "disk says no" in str(err)
        assert Path(err.path).is_relative_to(output_dir)
        assert calls["n"] == 2
        assert output_dir.exists()
