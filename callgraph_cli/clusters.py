"""Infer nested directory clusters from the files present in a render."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, List, Mapping, Tuple

from .models import Cluster

Parts = Tuple[str, ...]


def build_clusters(files: Mapping[int, str], root: str = "") -> List[Cluster]:
    """Group file ids by parent directory and nest the groups by path prefix.

    Directories are visited in path order. Each one is placed under the first
    existing cluster whose title is a component-wise prefix of it, recursively;
    otherwise it opens a new cluster at that level. Only directories holding at
    least one file get a cluster.
    """
    root_parts = PurePosixPath(root).parts if root else ()

    groups: Dict[Parts, List[int]] = {}
    for file_id, path in sorted(files.items()):
        groups.setdefault(PurePosixPath(path).parent.parts, []).append(file_id)

    clusters: List[Cluster] = []
    for directory in sorted(groups):
        relative = _strip(directory, root_parts)
        _insert(relative, relative, groups[directory], clusters)
    return clusters


def cluster_path(parts: Parts) -> str:
    return "/" + "/".join(p for p in parts if p != "/")


def _strip(parts: Parts, prefix: Parts) -> Parts:
    if prefix and parts[: len(prefix)] == prefix:
        return parts[len(prefix):]
    return tuple(p for p in parts if p not in ("/", "."))


def _title_parts(cluster: Cluster) -> Parts:
    return tuple(cluster.title.split("/")) if cluster.title else ()


def _insert(remaining: Parts, full: Parts, node_ids: List[int], clusters: List[Cluster]) -> None:
    for cluster in clusters:
        prefix = _title_parts(cluster)
        if remaining[: len(prefix)] == prefix:
            _insert(remaining[len(prefix):], full, node_ids, cluster.children)
            return
    clusters.append(
        Cluster(title="/".join(remaining), path=cluster_path(full), node_ids=list(node_ids))
    )
