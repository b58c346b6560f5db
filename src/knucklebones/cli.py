from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from .board import parse_board
from .datasets import ExportArgs, run_export
from .errors import KnucklebonesError
from .paths import data_dir
from .rules import Position
from .selfplay import POLICIES, generate_games, summarize
from .solver import SearchConfig, explore, solve
from .tracking import log_metrics, log_params, tracking_run
from .tree import count_nodes, node_to_dict, principal_variation, render_tree

EMPTY = "___/___/___"


def _add_position_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--p1", default=EMPTY, help='Player 1 board, rows split by "/" (default: empty)')
    p.add_argument("--p2", default=EMPTY, help='Player 2 board, rows split by "/" (default: empty)')
    p.add_argument("--die", type=int, required=True, help="Die value in hand (1-6)")
    p.add_argument("--to-move", type=int, choices=[1, 2], default=1, help="Player to move")
    _add_search_args(p)


def _add_search_args(p: argparse.ArgumentParser, depth: int = 4) -> None:
    p.add_argument("--depth", type=int, default=depth, help=f"Search depth in plies (default: {depth})")
    p.add_argument(
        "--endgame-plies",
        type=int,
        default=2,
        help="Search exhaustively once a board can fill within this many plies",
    )
    p.add_argument(
        "--cache", action="store_true", help="Enable the transposition table"
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="knucklebones", description="Knucklebones solver CLI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument("--seed", type=int, default=42, help="Seed for dice and random policies")

    p_sol = sub.add_parser("solve", help="Evaluate a position and recommend a column")
    _add_position_args(p_sol)

    p_tree = sub.add_parser("tree", help="Print the explored search tree")
    _add_position_args(p_tree)
    p_tree.add_argument("--format", choices=["json", "text"], default="text")
    p_tree.add_argument(
        "--show-depth", type=int, default=None, help="Only print nodes down to this tree depth"
    )

    p_play = sub.add_parser("play", help="Simulate games between two policies")
    p_play.add_argument("--games", type=int, default=10)
    p_play.add_argument("--player1", choices=POLICIES, default="engine")
    p_play.add_argument("--player2", choices=POLICIES, default="random")
    p_play.add_argument("--epsilon", type=float, default=0.1)
    p_play.add_argument(
        "--tracking", choices=["none", "mlflow"], default="none", help="Experiment tracking backend"
    )
    p_play.add_argument("--log-dir", type=Path, default=Path("runs"))
    _add_search_args(p_play, depth=2)

    p_ds = sub.add_parser("datasets", help="Dataset utilities")
    g = p_ds.add_subparsers(dest="subcmd")
    p_export = g.add_parser(
        "export",
        help="Export self-play trajectories (CSV by default; parquet requires pandas+pyarrow)",
    )
    p_export.add_argument("--out", type=Path, default=None, help="Output directory (default: data dir)")
    p_export.add_argument("--games", type=int, default=20)
    p_export.add_argument("--depth", type=int, default=2)
    p_export.add_argument("--player1", choices=POLICIES, default="engine")
    p_export.add_argument("--player2", choices=POLICIES, default="random")
    p_export.add_argument("--epsilon", type=float, default=0.1)
    p_export.add_argument("--format", choices=["csv", "parquet", "both"], default="csv")
    p_export.add_argument(
        "--tracking", choices=["none", "mlflow"], default="none", help="Experiment tracking backend"
    )
    p_export.add_argument("--log-dir", type=Path, default=Path("runs"))

    return p


def _config(ns: argparse.Namespace) -> SearchConfig:
    return SearchConfig(depth=ns.depth, endgame_plies=ns.endgame_plies,
                        transposition_table=ns.cache)


def _position(ns: argparse.Namespace) -> Position:
    return Position(parse_board(ns.p1), parse_board(ns.p2), ns.to_move, ns.die)


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            print(f"{pkg}={getattr(mod, '__version__', '?')}")


def _run(ns: argparse.Namespace, argv: Optional[list[str]]) -> Optional[int]:
    if ns.cmd == "solve":
        res = solve(_position(ns), ns.depth, _config(ns))
        logging.info(
            "evaluation=%.4f best_move=%s q_values=%s exact=%s nodes=%d",
            res['value'],
            res['best_move'],
            [None if q is None else round(q, 4) for q in res['q_values']],
            res['exact'],
            res['nodes'],
        )
        return 0

    if ns.cmd == "tree":
        root = explore(_position(ns), ns.depth, _config(ns))
        logging.info("explored %d nodes pv=%s", count_nodes(root), principal_variation(root))
        if ns.format == "json":
            print(json.dumps(node_to_dict(root), indent=2))
        else:
            print(render_tree(root, ns.show_depth))
        return 0

    if ns.cmd in ("play", "datasets") and getattr(ns, "epsilon", None) is not None:
        if ns.epsilon < 0.0 or ns.epsilon > 1.0:
            logging.error("Epsilon out of range [0,1]: %s", ns.epsilon)
            return 2

    if ns.cmd == "play":
        with tracking_run(ns.tracking == "mlflow", run_name="play", log_dir=ns.log_dir):
            log_params({"games": ns.games, "player1": ns.player1, "player2": ns.player2,
                        "depth": ns.depth, "epsilon": ns.epsilon, "seed": ns.seed})
            games = generate_games(ns.player1, ns.player2, ns.games, ns.seed, _config(ns), ns.epsilon)
            summary = summarize(games)
            log_metrics({k: float(v) for k, v in summary.items()})
        logging.info(
            "games=%d p1_wins=%d p2_wins=%d draws=%d mean_margin=%.2f",
            summary['games'],
            summary.get('p1_wins', 0),
            summary.get('p2_wins', 0),
            summary.get('draws', 0),
            summary.get('mean_margin', 0.0),
        )
        return 0

    if ns.cmd == "datasets" and ns.subcmd == "export":
        with tracking_run(ns.tracking == "mlflow", run_name="datasets_export", log_dir=ns.log_dir):
            out = run_export(ExportArgs(
                out=ns.out if ns.out is not None else data_dir(),
                games=ns.games,
                depth=ns.depth,
                policy_1=ns.player1,
                policy_2=ns.player2,
                epsilon=ns.epsilon,
                seed=ns.seed,
                format=ns.format,
                cli_argv=list(argv) if argv is not None else None,
            ))
        logging.info("Exported datasets to: %s", out)
        return 0

    return None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if getattr(ns, "version", False):
        from importlib.metadata import PackageNotFoundError, version as _ver

        try:
            print(_ver("knucklebones-solver"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    try:
        rc = _run(ns, argv)
    except KnucklebonesError as e:
        logging.error("%s", e)
        return 2
    except ValueError as e:
        logging.error("Invalid search settings: %s", e)
        return 2
    except RuntimeError as e:
        logging.error("%s", e)
        return 2
    if rc is None:
        parser.print_help()
        return 0
    return rc


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
