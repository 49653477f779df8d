"""
Snapshot builder for local checkouts.

Walks a repository directory into a ``RepoSnapshot``: the full tree of
files and directories, plus the contents of only those files the
selector asks for. Also loads snapshots saved as JSON, so hosted
repositories can be fetched elsewhere and graded here.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from repo_grader.config import RepoGraderConfig
from repo_grader.errors import invalid_snapshot, path_not_found, permission_denied
from repo_grader.file_selector import select_analysis_files, select_tech_files
from repo_grader.schemas import FileContent, RepoMetadata, RepoSnapshot, TreeEntry

logger = logging.getLogger(__name__)


def is_binary_file(file_path: Path, sample_size: int = 8192) -> bool:
    """
    Detect if a file is binary by checking for null bytes.

    Args:
        file_path: Path to file
        sample_size: Number of bytes to sample

    Returns:
        True if file appears to be binary
    """
    try:
        with open(file_path, "rb") as f:
            sample = f.read(sample_size)
            # Check for null bytes (common in binary files)
            if b"\x00" in sample:
                return True
            # Check for high ratio of non-printable characters
            non_printable = sum(1 for b in sample if b < 32 and b not in (9, 10, 13))
            if len(sample) > 0 and non_printable / len(sample) > 0.3:
                return True
            return False
    except OSError:
        return True  # Assume binary on read error


def build_tree(repo_path: Path, skip_dirs: frozenset[str]) -> list[TreeEntry]:
    """
    List every directory and file under ``repo_path`` as tree entries.

    Skipped directories are pruned during the walk, so nothing beneath
    them appears. Paths are '/'-separated and relative to the root.
    """
    entries: list[TreeEntry] = []
    for root, dirs, filenames in os.walk(repo_path):
        root_path = Path(root)
        dirs[:] = sorted(d for d in dirs if d not in skip_dirs)

        for d in dirs:
            rel = (root_path / d).relative_to(repo_path).as_posix()
            entries.append(TreeEntry(path=rel, type="tree"))

        for filename in sorted(filenames):
            file_path = root_path / filename
            rel = file_path.relative_to(repo_path).as_posix()
            try:
                size = file_path.stat().st_size
            except OSError:
                # Broken symlinks and the like still appear, without a size
                size = None
            entries.append(TreeEntry(path=rel, type="blob", size=size))
    return entries


def read_text_file(file_path: Path, max_bytes: int) -> str | None:
    """Return a file's text, or None if it is too large, binary or unreadable."""
    try:
        if file_path.stat().st_size > max_bytes:
            logger.debug(f"Skipping {file_path}: larger than {max_bytes} bytes")
            return None
        if is_binary_file(file_path):
            logger.debug(f"Skipping {file_path}: binary")
            return None
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        logger.debug(f"Skipping {file_path}: {e}")
        return None


def scan_directory(
    repo_path: Path,
    config: RepoGraderConfig | None = None,
    metadata: RepoMetadata | None = None,
) -> RepoSnapshot:
    """
    Build a snapshot of a local repository.

    Args:
        repo_path: Path to repository root
        config: Selector bounds and skip list
        metadata: Host facts to attach (license, language)

    Returns:
        RepoSnapshot with the full tree and the selected file contents

    Raises:
        SnapshotError: If the path is missing, not a directory or unreadable
    """
    config = config or RepoGraderConfig.default()
    settings = config.selector

    repo_path = Path(repo_path).resolve()
    if not repo_path.exists():
        raise path_not_found(str(repo_path))
    if not repo_path.is_dir():
        raise invalid_snapshot(str(repo_path), "expected a directory")
    if not os.access(repo_path, os.R_OK | os.X_OK):
        raise permission_denied(str(repo_path))

    tree = build_tree(repo_path, settings.all_skip_dirs)

    wanted: list[str] = []
    for path in select_tech_files(tree, settings) + select_analysis_files(tree, settings):
        if path not in wanted:
            wanted.append(path)

    files: list[FileContent] = []
    for rel in wanted:
        content = read_text_file(repo_path / rel, settings.max_snapshot_file_bytes)
        if content is not None:
            files.append(FileContent(path=rel, content=content))

    if metadata is None:
        metadata = RepoMetadata(name=repo_path.name)

    logger.info(f"Scanned {repo_path}: {len(tree)} tree entries, {len(files)} files read")
    return RepoSnapshot(tree=tree, files=files, metadata=metadata)


def load_snapshot(path: Path) -> RepoSnapshot:
    """
    Load a snapshot saved as JSON.

    Accepts camelCase or snake_case keys.

    Raises:
        SnapshotError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    if not path.exists():
        raise path_not_found(str(path))
    try:
        with open(path) as f:
            data = json.load(f)
    except PermissionError:
        raise permission_denied(str(path))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise invalid_snapshot(str(path), f"not valid JSON ({e})")

    try:
        return RepoSnapshot.model_validate(data)
    except ValidationError as e:
        raise invalid_snapshot(str(path), str(e))


def save_snapshot(snapshot: RepoSnapshot, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(snapshot.model_dump_json(by_alias=True, indent=2))
    return path
