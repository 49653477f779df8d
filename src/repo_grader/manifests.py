"""
Forgiving helpers shared by the manifest detectors.

Structured manifests are parsed with a parse-or-skip policy: anything
that is not valid JSON, or not shaped the way the detector expects,
yields nothing instead of raising.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

NPM_DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")
COMPOSER_DEPENDENCY_SECTIONS = ("require", "require-dev")


def basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def load_json_object(path: str, content: str) -> dict[str, Any] | None:
    """Parse ``content`` as a JSON object, or return None if it is anything else."""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, RecursionError):
        logger.debug(f"Skipping malformed JSON manifest: {path}")
        return None
    if not isinstance(data, dict):
        logger.debug(f"Skipping JSON manifest without a top-level object: {path}")
        return None
    return data


def dependency_map(manifest: dict[str, Any], sections: tuple[str, ...]) -> dict[str, Any]:
    """
    Merge the dependency tables named by ``sections``.

    Later sections override earlier ones for the same package name;
    sections that are missing or not objects are ignored.
    """
    merged: dict[str, Any] = {}
    for section in sections:
        table = manifest.get(section)
        if isinstance(table, dict):
            merged.update(table)
    return merged


def version_string(value: Any) -> str | None:
    """Manifest version values are only kept when they are plain strings."""
    if isinstance(value, str) and value:
        return value
    return None
