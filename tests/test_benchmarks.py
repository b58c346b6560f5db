from pathlib import Path

import pytest

from knucklebones.board import empty_board
from knucklebones.datasets import ExportArgs, run_export
from knucklebones.rules import Position
from knucklebones.solver import solve

pytest.importorskip("pytest_benchmark")


def test_benchmark_opening_solve(benchmark):
    pos = Position(empty_board(), empty_board(), 1, 6)
    res = benchmark(lambda: solve(pos, 3))
    assert res['best_move'] in (0, 1, 2)


def test_benchmark_small_export(tmp_path: Path, benchmark):
    def _export():
        return run_export(ExportArgs(out=tmp_path / "bench", games=1, depth=1))

    out = benchmark(_export)
    assert (out / "knucklebones_trajectories.csv").exists()
