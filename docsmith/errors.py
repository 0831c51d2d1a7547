"""Error taxonomy for documentation build cycles."""

from __future__ import annotations


class DocsmithError(RuntimeError):
    """Base class for docsmith failures."""


class MissingOptionalInput(DocsmithError):
    """An optional input (README, manifest, assets folder) is absent.

    Callers log it and continue without the content.
    """


class MissingRequiredInput(DocsmithError):
    """A required input is absent or unreadable; the current cycle aborts."""


class ExternalToolFailure(DocsmithError):
    """A collaborator (template engine, graph renderer, search index) failed."""

    def __init__(self, message: str, *, subject: str | None = None) -> None:
        super().__init__(message)
        self.subject = subject


class RenderError(ExternalToolFailure):
    """Rendering or writing a page failed; fatal to the current cycle."""


class BuildAborted(DocsmithError):
    """Raised when a build cycle stops before completion."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Build aborted during {stage}: {cause}")
        self.stage = stage
        self.cause = cause


__all__ = [
    "BuildAborted",
    "DocsmithError",
    "ExternalToolFailure",
    "MissingOptionalInput",
    "MissingRequiredInput",
    "RenderError",
]
