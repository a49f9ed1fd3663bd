"""
This module orchestrates a full compatibility check: it locates the manifest and the
git repository, builds the old snapshot from history and the new one from the working
tree, and compares them.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from crate_compat.core.config import MANIFEST_FILE_NAME, SOURCE_ENCODING
from crate_compat.core.errors import NotFoundError
from crate_compat.models.schemas import CompatibilityReport, Module
from crate_compat.services import git_client
from crate_compat.services.compatibility import check_compatibility
from crate_compat.services.manifest import ensure_single_package, find_manifest, parse_manifest, read_manifest
from crate_compat.services.module_resolver import resolve_crate
from crate_compat.services.source_provider import (
    FilesystemSourceProvider,
    SnapshotSourceProvider,
    SourceProvider,
)
from crate_compat.services.surface_extractor import extract_module

logger = logging.getLogger(__name__)


def build_snapshot(provider: SourceProvider) -> List[Module]:
    """
    Resolves the whole module tree behind `provider` and extracts each module's public
    surface. Any failure propagates; no partial snapshot is returned.
    """
    return [extract_module(parsed.path, parsed.items) for parsed in resolve_crate(provider)]


def perform_check(directory: Union[str, Path] = ".", oid: Optional[str] = None) -> CompatibilityReport:
    """
    Compares the crate found from `directory` with its state at commit `oid`.

    Args:
        directory (str | Path): any directory inside the crate (default: current directory).
        oid (str | None): commit to compare against; HEAD when None.

    Returns:
        CompatibilityReport: the non-compatible verdicts.

    Raises:
        CompatCheckError: on any missing file, parse failure or unsupported layout.
    """
    work_dir = Path(directory).resolve()

    # 1) Manifest of the working tree
    manifest_depth, manifest_path = find_manifest(work_dir)
    new_manifest = ensure_single_package(read_manifest(manifest_path), str(manifest_path))

    # 2) Repository and commit; the repository root must not be below the manifest
    repo_depth, repo = git_client.locate_repository(work_dir)
    try:
        prefix = git_client.manifest_prefix(work_dir, repo_depth, manifest_depth)
        commit = git_client.resolve_commit(repo, oid)
        tree = git_client.commit_tree(commit)
        label = commit.hexsha[:7]
        logger.info("Comparing %s with commit %s (prefix '%s')", manifest_path.parent, label, prefix)

        # 3) Manifest at the commit, the library root may have moved since
        manifest_blob = (prefix / MANIFEST_FILE_NAME).as_posix()
        try:
            old_manifest_text = git_client.blob_at(tree, manifest_blob).decode(SOURCE_ENCODING)
        except UnicodeDecodeError as e:
            raise NotFoundError(f"cannot decode {label}:{manifest_blob}: {e}") from e
        old_origin = f"{label}:{manifest_blob}"
        old_manifest = ensure_single_package(parse_manifest(old_manifest_text, old_origin), old_origin)

        # 4) Both snapshots
        old_provider = SnapshotSourceProvider(tree, old_manifest.library_entry, prefix=prefix, label=label)
        new_provider = FilesystemSourceProvider(manifest_path.parent, new_manifest.library_entry)
        old_modules = build_snapshot(old_provider)
        new_modules = build_snapshot(new_provider)
    finally:
        # stops the persistent git cat-file helpers
        repo.close()
    logger.info("Old snapshot: %d modules, new snapshot: %d modules", len(old_modules), len(new_modules))

    # 5) Comparison
    return check_compatibility(old_modules, new_modules)
