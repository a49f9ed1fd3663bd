"""
Read-only access to git history through GitPython.

Every GitPython failure is translated here into `NotFoundError` so that callers only
deal with the checker's own error kinds.
"""

import logging
from pathlib import Path, PurePath, PurePosixPath
from typing import Optional, Tuple, Union

from git import Repo
from git.exc import (
    AmbiguousObjectName,
    BadName,
    BadObject,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)
from git.objects.commit import Commit
from git.objects.tree import Tree

from crate_compat.core.errors import NotFoundError, UnsupportedConfiguration

logger = logging.getLogger(__name__)


def locate_repository(directory: Union[str, Path]) -> Tuple[int, Repo]:
    """
    Walks from `directory` up to the filesystem root and opens the first git repository.

    Returns:
        (depth, repo) where depth is the number of parent steps taken (0 = directory itself).
    """
    start = Path(directory).resolve()
    for depth, path in enumerate([start, *start.parents]):
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            continue
        logger.debug("Found git repository at %s (depth %d)", path, depth)
        return depth, repo

    raise NotFoundError(f"not found git repository for {directory}")


def resolve_commit(repo: Repo, oid: Optional[str] = None) -> Commit:
    """Returns the commit named by `oid`, or the commit HEAD points to."""
    try:
        if oid is None:
            return repo.head.commit
        return repo.commit(oid)
    except (BadName, BadObject, AmbiguousObjectName, GitCommandError, ValueError) as e:
        wanted = oid or "HEAD"
        raise NotFoundError(f"not found commit {wanted} in {repo.git_dir}: {e}") from e


def commit_tree(commit: Commit) -> Tree:
    return commit.tree


def blob_at(tree: Tree, path: str) -> bytes:
    """
    Returns the raw content of the blob at `path` (posix, relative to the tree root).

    Raises:
        NotFoundError: if no entry exists at `path` or the entry is not a blob.
    """
    try:
        obj = tree / path
    except KeyError as e:
        raise NotFoundError(f"not found {path} in tree {tree.hexsha[:7]}") from e
    if obj.type != "blob":
        raise NotFoundError(f"{path} in tree {tree.hexsha[:7]} is a {obj.type}, not a file")
    return obj.data_stream.read()


def manifest_prefix(directory: Union[str, PurePath], repo_depth: int, manifest_depth: int) -> PurePosixPath:
    """
    Location of the manifest directory inside the repository.

    Both depths count parent steps from `directory`. The components of `directory`
    between the repository root and the manifest directory form the prefix.

    Raises:
        UnsupportedConfiguration: if the repository root is below the manifest directory.
    """
    if repo_depth < manifest_depth:
        raise UnsupportedConfiguration(
            f"git repository root is below the manifest directory of {directory}"
        )
    if repo_depth == manifest_depth:
        return PurePosixPath()
    parts = PurePath(directory).parts
    return PurePosixPath(*parts[len(parts) - repo_depth:len(parts) - manifest_depth])
