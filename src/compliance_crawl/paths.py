from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    exports: Path
    trends: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(root=out_dir, exports=out_dir / "exports", trends=out_dir / "trends")
    for path in (paths.root, paths.exports, paths.trends):
        path.mkdir(parents=True, exist_ok=True)
    return paths
