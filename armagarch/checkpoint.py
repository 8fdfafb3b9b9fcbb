from pathlib import Path
import hashlib
import pickle
import logging
from typing import Optional

import numpy as np

from .config import ModelConfig
from .models import ForecastWindow


def run_fingerprint(prices: np.ndarray, config: ModelConfig) -> str:
    """Short hash of the price data and model settings a window fit depends on"""
    digest = hashlib.sha1()
    digest.update(np.ascontiguousarray(prices, dtype=float).tobytes())
    digest.update(repr(config).encode('utf-8'))
    return digest.hexdigest()[:12]


class CheckpointManager:
    def __init__(self, checkpoint_dir: Path, fingerprint: str = ''):
        self.checkpoint_dir = Path(checkpoint_dir)
        self.checkpoint_dir.mkdir(parents=True, exist_ok=True)
        self.fingerprint = fingerprint
        self.logger = logging.getLogger('armagarch.checkpoint')

    def _path(self, start: int, end: int) -> Path:
        # Fits from another series or config never share a file name
        prefix = f"window_{self.fingerprint}_" if self.fingerprint else "window_"
        return self.checkpoint_dir / f"{prefix}{start:06d}_{end:06d}.pkl"

    def save_checkpoint(self, window: ForecastWindow):
        """Save a fitted window"""
        with open(self._path(window.start_index, window.end_index), 'wb') as f:
            pickle.dump(window, f)

    def load_checkpoint(self, start: int, end: int) -> Optional[ForecastWindow]:
        """Load a fitted window if it exists"""
        checkpoint_file = self._path(start, end)
        if checkpoint_file.exists():
            with open(checkpoint_file, 'rb') as f:
                window = pickle.load(f)
            self.logger.debug(f"Loaded checkpoint {checkpoint_file.name}")
            return window
        return None
