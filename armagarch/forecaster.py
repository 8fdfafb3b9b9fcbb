from typing import Dict, List, Optional, Tuple
import logging
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
import numpy as np
import pandas as pd

from utils.progress import ProgressMonitor
from .checkpoint import CheckpointManager, run_fingerprint
from .config import ModelConfig
from .estimator import ARMAGARCH
from .models import ForecastWindow
from .scenarios import quantile_label

logger = logging.getLogger(__name__)


def _fit_window(model: ARMAGARCH, start: int, end: int) -> ForecastWindow:
    """Fit one window; module level so worker processes can unpickle it"""
    series = model.time_series
    window_model = model.clone_with_window(start, end)
    result = window_model.fit()
    next_value = series.value_at(end + 1) if end + 1 < len(series) else None
    return ForecastWindow(
        start_index=start,
        end_index=end,
        start_label=series.label_at(start),
        end_label=series.label_at(end),
        result=result,
        next_value=next_value
    )


class RollingForecaster:
    """Fits the model over rolling or expanding windows and backtests its quantiles"""

    def __init__(self, series, window_size: int,
                 step_size: int = 1,
                 config: Optional[ModelConfig] = None,
                 expanding: bool = False,
                 parallel: bool = False,
                 max_workers: Optional[int] = None,
                 checkpoint_dir: Optional[Path] = None,
                 show_progress: bool = True):
        """
        Initialize forecaster

        Args:
            series: Price series or an ARMAGARCH model whose settings are reused
            window_size: Observations in each (first, if expanding) window
            step_size: Observations between consecutive window ends
            config: Settings for a newly built model; ignored for a model input
            expanding: Keep the start fixed at 0 and grow the window
            parallel: Fit windows in worker processes
            max_workers: Worker count for parallel fits
            checkpoint_dir: Directory for per-window pickle checkpoints
            show_progress: Show a tqdm progress bar
        """
        self.model = series if isinstance(series, ARMAGARCH) else ARMAGARCH(series, config)
        n = len(self.model.time_series)
        if window_size < 3:
            raise ValueError(f"window_size must be at least 3, got {window_size}")
        if window_size > n:
            raise ValueError(f"window_size {window_size} exceeds series length {n}")
        if step_size < 1:
            raise ValueError(f"step_size must be positive, got {step_size}")

        self.window_size = window_size
        self.step_size = step_size
        self.expanding = expanding
        self.parallel = parallel
        self.max_workers = max_workers
        self.checkpoints = None
        if checkpoint_dir:
            fingerprint = run_fingerprint(self.model.prices, self.model.config)
            self.checkpoints = CheckpointManager(checkpoint_dir, fingerprint)
        self.show_progress = show_progress
        self.logger = logging.getLogger('armagarch.forecaster')
        self.windows: List[ForecastWindow] = []

    def window_bounds(self) -> List[Tuple[int, int]]:
        """(start, end) index pairs, end inclusive"""
        n = len(self.model.time_series)
        bounds = []
        for end in range(self.window_size - 1, n, self.step_size):
            start = 0 if self.expanding else end - self.window_size + 1
            bounds.append((start, end))
        return bounds

    def generate_windows(self) -> List[ForecastWindow]:
        """Fit every window, reusing checkpoints where available"""
        bounds = self.window_bounds()
        self.logger.info(
            f"Fitting {len(bounds)} {'expanding' if self.expanding else 'rolling'} windows "
            f"of {self.window_size} observations"
        )

        fitted: Dict[Tuple[int, int], ForecastWindow] = {}
        pending = []
        for start, end in bounds:
            window = self.checkpoints.load_checkpoint(start, end) if self.checkpoints else None
            if window is not None:
                fitted[(start, end)] = window
            else:
                pending.append((start, end))

        if len(fitted):
            self.logger.info(f"Restored {len(fitted)} windows from checkpoints")

        monitor = ProgressMonitor(
            total=len(pending), desc="Fitting windows",
            logger=self.logger, disable=not self.show_progress
        )
        try:
            if self.parallel and len(pending) > 1:
                with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
                    futures = {
                        executor.submit(_fit_window, self.model, start, end): (start, end)
                        for start, end in pending
                    }
                    for future, key in futures.items():
                        fitted[key] = self._store(future.result())
                        monitor.update(status=f"window ending at {key[1]}")
            else:
                for start, end in pending:
                    fitted[(start, end)] = self._store(_fit_window(self.model, start, end))
                    monitor.update(status=f"window ending at {end}")
        finally:
            monitor.close()

        self.windows = [fitted[key] for key in bounds]
        n_fallback = sum(not w.result.converged for w in self.windows)
        if n_fallback:
            self.logger.warning(f"{n_fallback} of {len(self.windows)} windows did not converge")
        return self.windows

    def _store(self, window: ForecastWindow) -> ForecastWindow:
        if self.checkpoints:
            self.checkpoints.save_checkpoint(window)
        return window

    def to_dataframe(self) -> pd.DataFrame:
        """One row per window with all scalar fit fields"""
        rows = []
        for window in self.windows:
            row = {
                'start_index': window.start_index,
                'end_index': window.end_index,
                'start_label': window.start_label,
                'end_label': window.end_label,
            }
            row.update(window.result.to_series().to_dict())
            row['converged'] = window.result.converged
            row['next_value'] = np.nan if window.next_value is None else window.next_value
            rows.append(row)
        return pd.DataFrame(rows)

    def get_forecast_series(self, field: str) -> pd.Series:
        """One fit field (e.g. 'Vol' or 'Quantile=1%') indexed by window end label"""
        if not self.windows:
            raise ValueError("No windows fitted; call generate_windows() first")
        values = [window.result[field] for window in self.windows]
        index = [window.end_label for window in self.windows]
        return pd.Series(values, index=index, name=field, dtype=float)

    def breach_rates(self) -> pd.Series:
        """
        Share of windows whose next observation fell below each quantile forecast.

        A well-calibrated model has a breach rate close to the quantile level.
        """
        scored = [w for w in self.windows if w.next_value is not None]
        if not scored:
            raise ValueError("No window has a following observation to score")

        rates = {}
        for level in self.model.config.quantiles:
            forecasts = np.array([w.result.quantiles[level] for w in scored])
            realized = np.array([w.next_value for w in scored])
            rates[quantile_label(level)] = float(np.mean(realized < forecasts))

        self.logger.info(
            f"Breach rates over {len(scored)} windows: "
            + ", ".join(f"{k}={v:.3f}" for k, v in rates.items())
        )
        return pd.Series(rates, name='breach_rate')
