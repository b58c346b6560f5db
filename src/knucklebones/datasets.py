"""
Self-play trajectory export.

One row per ply: the position before the move (boards, mover, die), the
chosen column, the engine's evaluation when the mover searched, and the game
outcome. A ``manifest.json`` records arguments, versions, row counts and
checksums so an export can be reproduced.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .paths import get_git_commit, get_git_is_dirty
from .selfplay import generate_games, summarize
from .solver import SearchConfig
from .tracking import log_artifact, log_metrics, log_params

DATASET_VERSION = "1.0.0"
TRAJECTORIES_CSV = "knucklebones_trajectories.csv"
TRAJECTORIES_PARQUET = "knucklebones_trajectories.parquet"


@dataclass
class ExportArgs:
    out: Path
    games: int = 20
    depth: int = 2
    policy_1: str = "engine"
    policy_2: str = "random"
    epsilon: float = 0.1
    seed: int = 42
    format: str = "csv"  # one of: "csv", "parquet", "both"
    cli_argv: Optional[List[str]] = None


def _schema_hash(rows: List[Dict[str, Any]]) -> str:
    keys = sorted({k for r in rows for k in r.keys()})
    return hashlib.sha256("\n".join(keys).encode("utf-8")).hexdigest()


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        mod = __import__(pkg)
        ver = getattr(mod, "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    fieldnames = sorted({k for r in rows for k in r.keys()})
    with path.open('w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in rows:
            w.writerow(r)


def run_export(args: ExportArgs) -> Path:
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")
    have_parquet = all(importlib.util.find_spec(p) is not None for p in ("pandas", "pyarrow"))
    if fmt == "parquet" and not have_parquet:
        raise RuntimeError(
            "Parquet dependencies not available (install pandas and pyarrow). "
            "Use pip install .[parquet] to enable parquet support."
        )
    args.out.mkdir(parents=True, exist_ok=True)

    config = SearchConfig(depth=args.depth)
    logging.info("Playing %d games (%s vs %s, depth=%d)…",
                 args.games, args.policy_1, args.policy_2, args.depth)
    games = generate_games(args.policy_1, args.policy_2, args.games, args.seed, config, args.epsilon)
    rows: List[Dict[str, Any]] = []
    for gi, game in enumerate(games):
        for entry in game:
            rows.append({'game': gi, **entry})
    summary = summarize(games)
    logging.info("Collected %d rows from %d games", len(rows), len(games))

    csv_path = args.out / TRAJECTORIES_CSV
    parquet_path = args.out / TRAJECTORIES_PARQUET
    wrote_csv = wrote_parquet = False
    if fmt in {"csv", "both"}:
        _write_csv(csv_path, rows)
        wrote_csv = True
        logging.info("Wrote CSV: %s (%d rows)", csv_path, len(rows))
    if fmt in {"parquet", "both"}:
        if have_parquet:
            import pandas as pd  # type: ignore

            pd.DataFrame(rows).to_parquet(parquet_path)
            wrote_parquet = True
            logging.info("Wrote Parquet file to %s", parquet_path)
        else:
            logging.warning(
                "Parquet dependencies not available; proceeding with CSV only, "
                "manifest will record parquet_written=false."
            )

    files = {
        "trajectories_csv": csv_path if wrote_csv else None,
        "trajectories_parquet": parquet_path if wrote_parquet else None,
    }
    outcomes = Counter(game[0]['winner'] for game in games if game)
    manifest = {
        "dataset_version": DATASET_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "games": args.games,
            "depth": args.depth,
            "policy_1": args.policy_1,
            "policy_2": args.policy_2,
            "epsilon": args.epsilon,
            "seed": args.seed,
            "format": fmt,
        },
        "git_commit": get_git_commit(),
        "git_is_dirty": get_git_is_dirty(),
        "python": {"python_version": sys.version.split(" ")[0], "packages": _package_versions()},
        "cli_argv": args.cli_argv,
        "row_counts": {"trajectories": len(rows), "games": len(games)},
        "outcomes": {"p1": outcomes.get(1, 0), "p2": outcomes.get(2, 0), "draw": outcomes.get(0, 0)},
        "summary": summary,
        "schema_hash": _schema_hash(rows) if rows else None,
        "files": {k: (str(p) if p else None) for k, p in files.items()},
        "checksums": {k: _sha256_file(p) for k, p in files.items() if p is not None},
        "parquet_written": wrote_parquet,
    }
    manifest_path = args.out / "manifest.json"
    manifest_path.write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json with metadata and checksums")

    log_params({k: v for k, v in manifest["args"].items()})
    log_metrics({k: float(v) for k, v in summary.items()})
    log_artifact(manifest_path)
    for p in files.values():
        if p is not None:
            log_artifact(p)
    return args.out
