"""
Locates and reads the crate manifest (Cargo.toml).

Only two facts are taken from it: the path of the library root file (`[lib] path`,
default `src/lib.rs`) and whether it declares a `[workspace]`.
"""

import logging
import tomllib
from pathlib import Path, PurePosixPath
from typing import Tuple, Union

from crate_compat.core.config import DEFAULT_LIB_PATH, MANIFEST_FILE_NAME
from crate_compat.core.errors import NotFoundError, ParseFailure, UnsupportedConfiguration
from crate_compat.models.schemas import ManifestInfo

logger = logging.getLogger(__name__)


def find_manifest(directory: Union[str, Path]) -> Tuple[int, Path]:
    """
    Walks from `directory` up to the filesystem root looking for the manifest file.

    Returns:
        (depth, manifest_path) where depth is the number of parent steps taken.
    """
    start = Path(directory).resolve()
    for depth, path in enumerate([start, *start.parents]):
        candidate = path / MANIFEST_FILE_NAME
        if candidate.is_file():
            logger.debug("Found manifest %s (depth %d)", candidate, depth)
            return depth, candidate

    raise NotFoundError(f"not found {MANIFEST_FILE_NAME} for {directory}")


def parse_manifest(contents: str, origin: str) -> ManifestInfo:
    try:
        data = tomllib.loads(contents)
    except tomllib.TOMLDecodeError as e:
        raise ParseFailure(f"failed to parse {origin}: {e}") from e

    lib = data.get("lib")
    lib_path = DEFAULT_LIB_PATH
    if isinstance(lib, dict) and isinstance(lib.get("path"), str):
        lib_path = lib["path"]

    return ManifestInfo(
        library_entry=PurePosixPath(lib_path.replace("\\", "/")).as_posix(),
        is_workspace="workspace" in data,
    )


def read_manifest(path: Union[str, Path]) -> ManifestInfo:
    manifest_path = Path(path)
    try:
        contents = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"not found {manifest_path}") from e
    except UnicodeDecodeError as e:
        raise ParseFailure(f"failed to read {manifest_path}: {e}") from e
    return parse_manifest(contents, str(manifest_path))


def ensure_single_package(info: ManifestInfo, origin: str) -> ManifestInfo:
    """Rejects workspace manifests, which this tool does not handle."""
    if info.is_workspace:
        raise UnsupportedConfiguration(f"{origin} is a workspace manifest; run the check inside a member crate")
    return info
