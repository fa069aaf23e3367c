"""Cross-run drift detection.

Keeps the winner scores of each run and compares the most recent runs
against the older part of a rolling window. A drop in average stylistic
score, or a spike in its variance, raises an alert for operational review.
Alerts never change the outcome of a run.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

import numpy as np

from ..config import DriftConfig
from ..models import DriftAlertType, DriftSeverity
from ..storage.base import VoiceStore
from ..storage.records import DriftAlert, RunMetrics
from ..utils.logging import get_logger

logger = get_logger(__name__)


def _variance(values: List[float]) -> float:
    """Population variance; zero for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.var(values))


class DriftMonitor:
    """Records run metrics and checks each author's rolling window."""

    def __init__(
        self,
        store: VoiceStore,
        config: Optional[DriftConfig] = None,
        clock: Callable[[], float] = time.time,
        background: bool = False,
    ):
        self.store = store
        self.config = config or DriftConfig()
        self.clock = clock
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="drift") if background else None

    def record(self, metrics: RunMetrics) -> None:
        try:
            self.store.record_run_metrics(metrics)
        except Exception as e:
            logger.warning(f"Failed to record run metrics: {e}", extra_data={"run_id": metrics.run_id})

    def check(self, user_id: str) -> Optional[DriftAlert]:
        """Evaluate the rolling window for one author.

        Returns:
            The alert raised, or None. A similarity drop takes precedence
            over a variance spike.
        """
        cfg = self.config
        metrics = self.store.recent_run_metrics(user_id, cfg.rolling_window)
        if len(metrics) < cfg.min_runs:
            return None

        recent = metrics[:cfg.recent_window]
        older = metrics[cfg.recent_window:]
        if len(older) < cfg.min_older_runs:
            return None

        recent_stylistic = [m.stylistic for m in recent]
        older_stylistic = [m.stylistic for m in older]
        avg_recent = float(np.mean(recent_stylistic))
        avg_older = float(np.mean(older_stylistic))
        var_recent = _variance(recent_stylistic)
        var_older = _variance(older_stylistic)

        drop = avg_older - avg_recent
        if drop > cfg.drift_threshold:
            alert_type = DriftAlertType.SIMILARITY_DROP
            severity = DriftSeverity.HIGH if drop > cfg.high_severity_threshold else DriftSeverity.MEDIUM
        elif var_older > 0 and var_recent > var_older * cfg.variance_spike_multiplier:
            alert_type = DriftAlertType.VARIANCE_SPIKE
            severity = DriftSeverity.MEDIUM
        else:
            return None

        latest = metrics[0]
        alert = DriftAlert(
            user_id=user_id,
            alert_type=alert_type,
            severity=severity,
            model=latest.model or "unknown",
            prompt_version=latest.prompt_version or "unknown",
            avg_before=avg_older,
            avg_after=avg_recent,
            variance_before=var_older,
            variance_after=var_recent,
            run_count=len(metrics),
            created_at=self.clock(),
        )
        alert.id = self.store.create_drift_alert(alert)
        logger.warning(
            f"Drift alert for {user_id}: {alert_type.value} ({severity.value})",
            extra_data=alert.to_dict(),
        )
        return alert

    def _safe_check(self, user_id: str) -> Optional[DriftAlert]:
        try:
            return self.check(user_id)
        except Exception as e:
            logger.warning(f"Drift check failed for {user_id}: {e}")
            return None

    def schedule_check(self, user_id: str) -> None:
        """Run a drift check without blocking the caller when running in background."""
        if self._executor is not None:
            self._executor.submit(self._safe_check, user_id)
        else:
            self._safe_check(user_id)

    def rolling_stats(self, user_id: str, window_size: Optional[int] = None) -> Dict:
        """Averages and variances over the most recent runs, for dashboards."""
        metrics = self.store.recent_run_metrics(user_id, window_size or self.config.rolling_window)
        if not metrics:
            return {
                "run_count": 0,
                "avg_semantic": 0.0,
                "avg_stylistic": 0.0,
                "avg_combined": 0.0,
                "variance_semantic": 0.0,
                "variance_stylistic": 0.0,
                "variance_combined": 0.0,
                "latest_model": None,
                "latest_prompt_version": None,
            }

        semantic = [m.semantic for m in metrics]
        stylistic = [m.stylistic for m in metrics]
        combined = [m.combined for m in metrics]
        return {
            "run_count": len(metrics),
            "avg_semantic": float(np.mean(semantic)),
            "avg_stylistic": float(np.mean(stylistic)),
            "avg_combined": float(np.mean(combined)),
            "variance_semantic": _variance(semantic),
            "variance_stylistic": _variance(stylistic),
            "variance_combined": _variance(combined),
            "latest_model": metrics[0].model,
            "latest_prompt_version": metrics[0].prompt_version,
        }

    def close(self) -> None:
        """Wait for scheduled checks to finish."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
