"""
Optional MLflow tracking for self-play runs and exports.

MLflow is imported lazily; when it is not installed every call is a no-op
after a single warning.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

_warned = False
_active = False


def _mlflow():
    global _warned
    try:
        import mlflow  # type: ignore
    except ModuleNotFoundError:
        if not _warned:
            logging.warning("mlflow is not installed; tracking disabled")
            _warned = True
        return None
    return mlflow


@contextmanager
def tracking_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yield True while an MLflow run is active, False otherwise."""
    global _active
    mlflow = _mlflow() if enabled else None
    if mlflow is None:
        yield False
        return
    if log_dir is not None:
        mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
    with mlflow.start_run(run_name=run_name):
        _active = True
        try:
            yield True
        finally:
            _active = False


def log_params(params: Dict[str, object]) -> None:
    if _active:
        mlflow = _mlflow()
        mlflow.log_params(params)


def log_metrics(metrics: Dict[str, float]) -> None:
    if _active:
        mlflow = _mlflow()
        mlflow.log_metrics(metrics)


def log_artifact(path: Path, artifact_path: Optional[str] = None) -> None:
    if _active:
        mlflow = _mlflow()
        mlflow.log_artifact(str(path), artifact_path=artifact_path)
