"""
Shared fixtures for the crate_compat test suite.

- `items_of` parses a Rust snippet into its top-level item nodes.
- `surface_of` returns the extracted public declarations of a snippet.
- `memory_provider` builds a SourceProvider backed by a dict of posix paths to text,
  so the resolver can be tested without touching the filesystem.
- `git_crate` creates a throwaway git repository through GitPython.
"""

from pathlib import Path, PurePosixPath
from typing import Dict, Optional

import pytest

from crate_compat.models.schemas import Module
from crate_compat.services.rust_parser import parse_items
from crate_compat.services.source_provider import SourceProvider
from crate_compat.services.surface_extractor import extract_public_surface


class MemorySourceProvider(SourceProvider):
    """SourceProvider over an in-memory {posix path: text} mapping; records every lookup."""

    def __init__(self, files: Dict[str, str], library_entry: str = "src/lib.rs"):
        super().__init__(library_entry)
        self.files = dict(files)
        self.lookups = []

    def describe(self, candidate: PurePosixPath) -> str:
        return f"mem:{candidate.as_posix()}"

    def _load(self, candidate: PurePosixPath, origin: str) -> Optional[str]:
        self.lookups.append(candidate.as_posix())
        return self.files.get(candidate.as_posix())


@pytest.fixture
def items_of():
    def _items(source: str):
        return parse_items(source, "test.rs")
    return _items


@pytest.fixture
def surface_of():
    def _surface(source: str):
        return extract_public_surface(parse_items(source, "test.rs"))
    return _surface


@pytest.fixture
def module_of():
    """Builds a Module at `path` from a Rust snippet."""
    def _module(source: str, path=()):
        return Module(path=tuple(path), declarations=tuple(extract_public_surface(parse_items(source, "test.rs"))))
    return _module


@pytest.fixture
def memory_provider():
    return MemorySourceProvider


def write_files(root: Path, files: Dict[str, str]) -> None:
    """Writes {relative path: text} below root, creating directories."""
    for rel, text in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")


@pytest.fixture
def write_tree():
    return write_files


@pytest.fixture
def git_crate(tmp_path):
    """
    Returns a function `commit(files, message)` that writes `files` below `tmp_path`,
    commits them in a repository rooted there and returns the commit.
    """
    from git import Actor, Repo

    repo = Repo.init(tmp_path)
    actor = Actor("Test User", "test@example.com")

    def _commit(files: Dict[str, str], message: str = "update"):
        write_files(tmp_path, files)
        repo.index.add(list(files))
        return repo.index.commit(message, author=actor, committer=actor)

    _commit.repo = repo
    _commit.root = tmp_path
    return _commit
