"""
Error kinds raised by the checker.

Every error aborts the whole run: an incomplete module tree could hide or fabricate
findings, so no partial report is ever produced.
"""

from typing import Sequence, Tuple


class CompatCheckError(Exception):
    """Base class for every failure that aborts a run."""


class NotFoundError(CompatCheckError):
    """A manifest, repository, commit, blob or source file could not be found."""


class SourceNotFoundError(NotFoundError):
    """
    No source file exists for a module under any of the naming conventions.

    Attributes:
        module_path: segments of the module that was being resolved.
        attempted: every location that was tried, in the order it was tried.
    """

    def __init__(self, module_path: Sequence[str], attempted: Sequence[str]):
        self.module_path: Tuple[str, ...] = tuple(module_path)
        self.attempted: Tuple[str, ...] = tuple(attempted)
        shown = "::".join(("crate",) + self.module_path)
        super().__init__(f"not found source file for module {shown}: {' / '.join(self.attempted)}")


class ParseFailure(CompatCheckError):
    """Malformed source text or manifest."""


class UnsupportedConfiguration(CompatCheckError):
    """The project layout cannot be checked (workspace manifest, nested repository)."""
