"""Build-time content errors.

Every error is local to one document and carries the offending path so the
build can stop and name the file.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for errors that abort the build.

    Attributes:
        message: Human readable description of the problem
        path: Source file the error belongs to, if known
    """

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class ParseError(BuildError):
    """Missing or malformed metadata header."""


class FenceError(BuildError):
    """Unterminated fence, or a fence without a recognised language tag."""


class DanglingReferenceError(BuildError):
    """Cross-reference to a post that does not exist."""


class MissingAssetError(BuildError):
    """Local image or asset that cannot be found."""


class TemplateError(BuildError):
    """Template that cannot be loaded or rendered."""
