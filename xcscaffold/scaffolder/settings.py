"""Build-setting overrides applied on top of placeholder substitution.

The template's xcconfig files carry default values for the display name,
version numbers and deployment target.  ``BuildSettings`` holds optional
replacements for them; ``apply_xcconfig`` and ``apply_package_manifest``
rewrite the matching assignments in already-substituted text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from xcscaffold.errors import ValidationError
from xcscaffold.scaffolder.placeholders import DEFAULT_PLACEHOLDERS

_VERSION_PATTERN = re.compile(r"^\d+(\.\d+){0,2}$")
_BUILD_NUMBER_PATTERN = re.compile(r"^\d+(\.\d+)*$")
_DEPLOYMENT_TARGET_PATTERN = re.compile(r"^\d+(\.\d+)?$")

# xcconfig key for each BuildSettings field.
XCCONFIG_KEYS: dict[str, str] = {
    "display_name": "PRODUCT_DISPLAY_NAME",
    "marketing_version": "MARKETING_VERSION",
    "current_project_version": "CURRENT_PROJECT_VERSION",
    "deployment_target": "IPHONEOS_DEPLOYMENT_TARGET",
}

_IOS_PLATFORM_PATTERN = re.compile(r"\.iOS\((?:\.v\d+(?:_\d+)?|\"[0-9.]+\")\)")


class BuildSettings(BaseModel):
    """Optional overrides for generated build settings.

    ``None`` leaves the template's value untouched.  Unknown fields are
    rejected so a misspelt setting is never dropped.
    """

    model_config = ConfigDict(extra="forbid")

    display_name: Optional[str] = Field(default=None, description="Home-screen app name")
    marketing_version: Optional[str] = Field(default=None, description="e.g. '1.0' or '2.3.1'")
    current_project_version: Optional[str] = Field(default=None, description="Build number, e.g. '1'")
    deployment_target: Optional[str] = Field(default=None, description="Minimum iOS version, e.g. '17.0'")

    def validate_values(self, tokens: Optional[Iterable[str]] = None) -> None:
        """Check every provided value.

        Values are written after placeholder substitution, so they may not
        contain a template token (*tokens*, default: the standard set) nor
        ``//``, which starts a comment in xcconfig files.

        Raises:
            ValidationError: naming the offending setting.
        """
        forbidden = list(tokens) if tokens is not None else DEFAULT_PLACEHOLDERS.tokens()
        for field_name in XCCONFIG_KEYS:
            value = getattr(self, field_name)
            if value is None:
                continue
            if "//" in value:
                raise ValidationError(
                    placeholder=field_name,
                    reason="must not contain '//' (xcconfig comment marker)",
                    value=value,
                )
            for token in forbidden:
                if token in value:
                    raise ValidationError(
                        placeholder=field_name,
                        reason=f"must not contain the template token {token!r}",
                        value=value,
                    )

        if self.display_name is not None:
            if not self.display_name.strip():
                raise ValidationError(placeholder="display_name", reason="value must not be empty")
            if "\n" in self.display_name:
                raise ValidationError(
                    placeholder="display_name",
                    reason="must be a single line",
                    value=self.display_name,
                )
        _check_pattern(
            "marketing_version",
            self.marketing_version,
            _VERSION_PATTERN,
            "must be one to three dot-separated integers, e.g. '1.0'",
        )
        _check_pattern(
            "current_project_version",
            self.current_project_version,
            _BUILD_NUMBER_PATTERN,
            "must be dot-separated integers, e.g. '1' or '1.0.3'",
        )
        _check_pattern(
            "deployment_target",
            self.deployment_target,
            _DEPLOYMENT_TARGET_PATTERN,
            "must look like '17' or '17.0'",
        )

    def overrides(self) -> dict[str, str]:
        """Return ``{xcconfig_key: value}`` for every setting that is set."""
        result: dict[str, str] = {}
        for field_name, key in XCCONFIG_KEYS.items():
            value = getattr(self, field_name)
            if value is not None:
                result[key] = value.strip()
        return result

    def is_empty(self) -> bool:
        return not self.overrides()


def apply_xcconfig(text: str, settings: BuildSettings) -> str:
    """Rewrite ``KEY = value`` assignments in an xcconfig file.

    Only keys already present are changed; conditional assignments such as
    ``KEY[sdk=iphoneos*] = value`` are left alone.  Trailing ``//`` comments
    are dropped from rewritten lines.
    """
    overrides = settings.overrides()
    if not overrides:
        return text

    def _replace(match: re.Match[str]) -> str:
        key = match.group("key")
        if key not in overrides:
            return match.group(0)
        return f"{match.group('lead')}{overrides[key]}"

    pattern = re.compile(
        r"^(?P<lead>[ \t]*(?P<key>[A-Z][A-Z0-9_]*)[ \t]*=[ \t]*)[^\r\n]*",
        re.MULTILINE,
    )
    return pattern.sub(_replace, text)


def apply_package_manifest(text: str, settings: BuildSettings) -> str:
    """Update ``.iOS(...)`` platform declarations in a ``Package.swift``."""
    if settings.deployment_target is None:
        return text
    return _IOS_PLATFORM_PATTERN.sub(
        f".iOS({swift_platform_version(settings.deployment_target)})", text
    )


def swift_platform_version(target: str) -> str:
    """Convert ``"17"`` to ``"17.0"`` and ``"17.2"`` to ``"17.2"`` (quoted).

    The string literal is valid under any tools version; ``.vNN`` enum cases
    only exist for the iOS releases the manifest's tools version knows.
    """
    major, _, minor = target.strip().partition(".")
    return f'"{int(major)}.{int(minor or 0)}"'


def _check_pattern(
    name: str, value: Optional[str], pattern: re.Pattern[str], reason: str
) -> None:
    if value is None:
        return
    if not pattern.match(value.strip()):
        raise ValidationError(placeholder=name, reason=reason, value=value)
