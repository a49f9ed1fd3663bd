"""
Source providers resolve a module path to the text of the file that defines it.

Two realizations share the file naming rules:
- `FilesystemSourceProvider` reads the live working tree.
- `SnapshotSourceProvider` reads blobs from a git tree at a historical commit.

For a module path `a::b` the candidates are tried in this order, relative to the
directory holding the library root file:
    1. `a/b.rs`      (2018 edition layout)
    2. `a/b/mod.rs`  (2015 edition layout)
The first one that exists wins, even when both are present. The crate root (empty
path) is the library root file itself.

Providers hold no mutable state and can be shared by concurrent readers.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import List, NamedTuple, Optional, Union

from git.objects.tree import Tree

from crate_compat.core.config import SOURCE_ENCODING
from crate_compat.core.errors import NotFoundError, SourceNotFoundError
from crate_compat.models.schemas import SourcePath, show_path
from crate_compat.services import git_client

logger = logging.getLogger(__name__)


class SourceFile(NamedTuple):
    origin: str
    text: str


class SourceProvider(ABC):
    """Resolves a SourcePath to source text under the two file naming conventions."""

    def __init__(self, library_entry: Union[str, PurePosixPath]):
        self.library_entry = PurePosixPath(library_entry)
        self.module_dir = self.library_entry.parent

    def candidates(self, path: SourcePath) -> List[PurePosixPath]:
        if not path:
            return [self.library_entry]
        base = self.module_dir.joinpath(*path)
        return [base.parent / f"{base.name}.rs", base / "mod.rs"]

    def open(self, path: SourcePath) -> SourceFile:
        """
        Returns the first existing candidate for `path`.

        Raises:
            SourceNotFoundError: if no candidate exists; it lists every attempted location.
            NotFoundError: if the file exists but cannot be decoded as text.
        """
        attempted = []
        for candidate in self.candidates(path):
            origin = self.describe(candidate)
            attempted.append(origin)
            text = self._load(candidate, origin)
            if text is not None:
                logger.debug("Module %s -> %s", show_path(path), origin)
                return SourceFile(origin, text)
            logger.debug("Module %s: no file at %s", show_path(path), origin)
        raise SourceNotFoundError(path, attempted)

    def read(self, path: SourcePath) -> str:
        return self.open(path).text

    @abstractmethod
    def describe(self, candidate: PurePosixPath) -> str:
        """Human readable location of a candidate, used in logs and errors."""

    @abstractmethod
    def _load(self, candidate: PurePosixPath, origin: str) -> Optional[str]:
        """Returns the decoded text, or None when the candidate does not exist."""


def _decode(data: bytes, origin: str) -> str:
    try:
        return data.decode(SOURCE_ENCODING)
    except UnicodeDecodeError as e:
        raise NotFoundError(f"cannot decode {origin} as {SOURCE_ENCODING}: {e}") from e


class FilesystemSourceProvider(SourceProvider):
    """Reads module files from the live working tree rooted at the manifest directory."""

    def __init__(self, root: Union[str, Path], library_entry: Union[str, PurePosixPath]):
        super().__init__(library_entry)
        self.root = Path(root)

    def describe(self, candidate: PurePosixPath) -> str:
        return str(self.root / candidate)

    def _load(self, candidate: PurePosixPath, origin: str) -> Optional[str]:
        file_path = self.root / candidate
        if not file_path.is_file():
            return None
        return _decode(file_path.read_bytes(), origin)


class SnapshotSourceProvider(SourceProvider):
    """
    Reads module files from a git tree.

    `prefix` is the location of the manifest directory inside the repository; it is
    empty when the manifest sits at the repository root.
    """

    def __init__(
        self,
        tree: Tree,
        library_entry: Union[str, PurePosixPath],
        prefix: Union[str, PurePosixPath] = "",
        label: str = "",
    ):
        super().__init__(library_entry)
        self.tree = tree
        self.prefix = PurePosixPath(prefix)
        self.label = label

    def repo_path(self, candidate: PurePosixPath) -> str:
        return (self.prefix / candidate).as_posix()

    def describe(self, candidate: PurePosixPath) -> str:
        location = self.repo_path(candidate)
        return f"{self.label}:{location}" if self.label else location

    def _load(self, candidate: PurePosixPath, origin: str) -> Optional[str]:
        try:
            data = git_client.blob_at(self.tree, self.repo_path(candidate))
        except NotFoundError:
            return None
        return _decode(data, origin)
