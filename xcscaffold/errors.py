"""Error types raised while scaffolding a project.

Every failure is surfaced to the caller with enough context (offending
placeholder or path) to act on.  Nothing is recovered silently.
"""

from __future__ import annotations

from typing import Any


class ScaffoldError(Exception):
    """Base class for all scaffolding failures.

    Carries a stable ``code`` plus keyword context that is rendered into the
    message and exposed through :meth:`to_dict`.

    Usage::

        raise ValidationError(placeholder="BundleIdentifier", reason="contains spaces")
    """

    code = "SCAFFOLD_ERROR"

    def __init__(self, message: str = "", **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        parts = [f"[{self.code}]"]
        if self.message:
            parts.append(self.message)
        if ctx_str:
            parts.append(f"({ctx_str})" if self.message else ctx_str)
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {
            "code": self.code,
            "message": self.message,
            **{k: str(v) for k, v in self.context.items()},
        }


class NotFoundError(ScaffoldError):
    """The template root is missing, not a directory, or unreadable."""

    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, message: str = "", *, path: Any = None, **context: Any) -> None:
        self.path = path
        super().__init__(message, path=path, **context)


class ValidationError(ScaffoldError):
    """A placeholder or build-setting value is missing or malformed.

    Raised before any output is written.
    """

    code = "INVALID_PLACEHOLDER"

    def __init__(
        self,
        message: str = "",
        *,
        placeholder: str,
        reason: str = "",
        value: Any = None,
    ) -> None:
        self.placeholder = placeholder
        self.reason = reason
        self.value = value
        context: dict[str, Any] = {"placeholder": placeholder}
        if value is not None:
            context["value"] = value
        super().__init__(message or reason, **context)

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """Convert the first error of a ``pydantic.ValidationError``.

        The error's location (e.g. ``deployment_target``) becomes
        ``placeholder`` so callers see the offending field by name.
        """
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "<model>"
        return cls(
            placeholder=field,
            reason=first.get("msg", str(exc)),
            value=first.get("input"),
        )


class WriteError(ScaffoldError):
    """Writing the output tree failed.

    ``output_path`` is the (possibly partially written) output root; the
    caller decides whether to retry or remove it.
    """

    code = "WRITE_FAILED"

    def __init__(
        self,
        message: str = "",
        *,
        path: Any = None,
        output_path: Any = None,
    ) -> None:
        self.path = path
        self.output_path = output_path
        super().__init__(message, path=path, output_path=output_path)
