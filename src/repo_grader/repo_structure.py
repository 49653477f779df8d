"""Mermaid flowchart of a repository's top-level directory layout."""

import re
from collections import Counter
from collections.abc import Sequence

from repo_grader.schemas import TreeEntry

NODE_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def _node_id(path: str) -> str:
    return NODE_ID_UNSAFE.sub("_", path)


def count_files_per_top_dir(tree: Sequence[TreeEntry]) -> Counter:
    return Counter(e.path.split("/")[0] for e in tree if e.type == "blob" and "/" in e.path)


def generate_mermaid_diagram(tree: Sequence[TreeEntry], max_depth: int = 2) -> str:
    """
    Render directories up to ``max_depth`` levels as a ``graph TD`` diagram.

    Root-level files are summarized in one ``ROOT_FILES`` node, and each
    top-level directory label carries the number of blobs beneath it.
    """
    dirs = sorted(
        e.path for e in tree if e.type == "tree" and len(e.path.split("/")) <= max_depth
    )
    top_counts = count_files_per_top_dir(tree)
    root_files = sum(1 for e in tree if e.type == "blob" and "/" not in e.path)

    lines = ["graph TD", '  ROOT["/"]']
    if root_files > 0:
        lines.append(f'  ROOT_FILES["{root_files} files"]')
        lines.append("  ROOT --> ROOT_FILES")

    added: set[str] = set()
    for d in dirs:
        parts = d.split("/")
        node = _node_id(d)
        count = top_counts.get(parts[0], 0)
        count_label = f" ({count})" if len(parts) == 1 and count > 0 else ""
        if node not in added:
            lines.append(f'  {node}["{parts[-1]}{count_label}"]')
            added.add(node)
        parent = "ROOT" if len(parts) == 1 else _node_id("/".join(parts[:-1]))
        lines.append(f"  {parent} --> {node}")

    return "\n".join(lines) + "\n"
