"""Placeholder tokens and value validation.

The template contains a fixed set of literal tokens.  ``PlaceholderResolver``
checks that a user-supplied value set covers every placeholder with a
well-formed value and returns the token -> value mapping the substitution
engine consumes.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from xcscaffold.errors import ValidationError

# ---------------------------------------------------------------------------
# Placeholder names and tokens
# ---------------------------------------------------------------------------

PROJECT_NAME = "ProjectName"
BUNDLE_IDENTIFIER = "BundleIdentifier"
FEATURE_MODULE_NAME = "FeatureModuleName"

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
BUNDLE_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$")


class Placeholder(BaseModel):
    """A symbolic placeholder and the literal token standing in for it."""

    name: str = Field(..., description="Symbolic name, e.g. 'ProjectName'")
    token: str = Field(..., min_length=1, description="Literal text in the template")
    kind: str = Field(
        default="identifier",
        description="Value format: 'identifier' or 'bundle_id'",
    )
    description: str = Field(default="")


class PlaceholderSet(BaseModel):
    """Fixed mapping of placeholder names to template tokens.

    Tokens must be distinct.  A token may be a substring of another one
    (``MyProject`` inside ``com.example.MyProject``); substitution always
    tries longer tokens first so the shorter token never matches inside the
    longer one.
    """

    placeholders: list[Placeholder]

    @model_validator(mode="after")
    def _check_unique(self) -> "PlaceholderSet":
        names = [p.name for p in self.placeholders]
        tokens = [p.token for p in self.placeholders]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate placeholder names: {names}")
        if len(set(tokens)) != len(tokens):
            raise ValueError(f"duplicate placeholder tokens: {tokens}")
        return self

    def names(self) -> list[str]:
        return [p.name for p in self.placeholders]

    def tokens(self) -> list[str]:
        return [p.token for p in self.placeholders]

    def get(self, name: str) -> Optional[Placeholder]:
        for placeholder in self.placeholders:
            if placeholder.name == name:
                return placeholder
        return None


DEFAULT_PLACEHOLDERS = PlaceholderSet(
    placeholders=[
        Placeholder(
            name=PROJECT_NAME,
            token="MyProject",
            description="App target, workspace and UI test bundle name",
        ),
        Placeholder(
            name=BUNDLE_IDENTIFIER,
            token="com.example.MyProject",
            kind="bundle_id",
            description="Reverse-DNS bundle identifier of the app",
        ),
        Placeholder(
            name=FEATURE_MODULE_NAME,
            token="MyProjectFeature",
            description="Swift Package module holding the app's features",
        ),
    ]
)


# ---------------------------------------------------------------------------
# Resolved mapping
# ---------------------------------------------------------------------------


class ResolvedPlaceholders(Mapping[str, str]):
    """Validated ``token -> value`` mapping.

    Iteration yields tokens longest-first, which is the order the
    substitution engine must try them in.
    """

    def __init__(self, replacements: Mapping[str, str], values: Mapping[str, str]) -> None:
        ordered = sorted(replacements.items(), key=lambda item: (-len(item[0]), item[0]))
        self._replacements: dict[str, str] = dict(ordered)
        self.values: dict[str, str] = dict(values)

    def __getitem__(self, token: str) -> str:
        return self._replacements[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._replacements)

    def __len__(self) -> int:
        return len(self._replacements)

    def __repr__(self) -> str:
        return f"ResolvedPlaceholders({self._replacements!r})"

    def value_of(self, name: str) -> str:
        """Return the validated value for placeholder *name*."""
        return self.values[name]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class PlaceholderResolver:
    """Validates user-supplied placeholder values.

    Every placeholder in the set is required.  Identifiers must look like
    Swift type names and bundle identifiers must be reverse-DNS.  A value may
    not contain any template token, otherwise the output would still carry
    template text after substitution.
    """

    def __init__(self, placeholder_set: PlaceholderSet = DEFAULT_PLACEHOLDERS) -> None:
        self.placeholder_set = placeholder_set

    def resolve(self, values: Mapping[str, Optional[str]]) -> ResolvedPlaceholders:
        """Validate *values* (keyed by placeholder name).

        Raises:
            ValidationError: naming the first offending placeholder.
        """
        known = set(self.placeholder_set.names())
        for name in values:
            if name not in known:
                raise ValidationError(
                    placeholder=name,
                    reason=f"unknown placeholder (expected one of {sorted(known)})",
                )

        validated: dict[str, str] = {}
        replacements: dict[str, str] = {}
        for placeholder in self.placeholder_set.placeholders:
            raw = values.get(placeholder.name)
            value = self._validate(placeholder, raw)
            validated[placeholder.name] = value
            replacements[placeholder.token] = value

        return ResolvedPlaceholders(replacements, validated)

    def _validate(self, placeholder: Placeholder, raw: Optional[str]) -> str:
        if raw is None:
            raise ValidationError(placeholder=placeholder.name, reason="value is required")
        if not isinstance(raw, str):
            raise ValidationError(
                placeholder=placeholder.name,
                reason=f"value must be a string, got {type(raw).__name__}",
                value=raw,
            )
        value = raw.strip()
        if not value:
            raise ValidationError(placeholder=placeholder.name, reason="value must not be empty")

        if placeholder.kind == "bundle_id":
            if not BUNDLE_ID_PATTERN.match(value):
                raise ValidationError(
                    placeholder=placeholder.name,
                    reason="must be a reverse-DNS identifier such as 'com.example.app' "
                    "(letters, digits, hyphens and dots only)",
                    value=raw,
                )
        elif not IDENTIFIER_PATTERN.match(value):
            raise ValidationError(
                placeholder=placeholder.name,
                reason="must start with a letter and contain only letters, digits and underscores",
                value=raw,
            )

        for token in self.placeholder_set.tokens():
            if token in value:
                raise ValidationError(
                    placeholder=placeholder.name,
                    reason=f"must not contain the template token {token!r}",
                    value=raw,
                )
        return value
