"""
Rolling ARMA-GARCH fits over a CSV price history with a quantile backtest.

Usage: python scripts/run_rolling_fit.py prices.csv SPX
"""

import sys
from pathlib import Path

# Add parent directory to path to import our modules
sys.path.append(str(Path(__file__).parent.parent))

from armagarch import ModelConfig, RollingForecaster
from price_data import PriceLoader
from utils.log_setup import setup_logging

# Window parameters
WINDOW_YEARS = 2
WINDOW_DAYS = int(WINDOW_YEARS * 252)
STEP_DAYS = 21  # Monthly refits

OUTPUT_PATH = Path("results/rolling")

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    data_file, price_column = sys.argv[1], sys.argv[2]

    logger = setup_logging(OUTPUT_PATH)

    try:
        logger.info("Starting rolling fit...")
        series = PriceLoader().load_csv(data_file, price_column)

        forecaster = RollingForecaster(
            series,
            window_size=WINDOW_DAYS,
            step_size=STEP_DAYS,
            config=ModelConfig(max_iterations=2000),
            parallel=True,
            checkpoint_dir=OUTPUT_PATH / "checkpoints"
        )
        forecaster.generate_windows()

        results = forecaster.to_dataframe()
        results.to_csv(OUTPUT_PATH / f"{price_column}_windows.csv", index=False)
        breaches = forecaster.breach_rates()
        logger.info(f"Quantile breach rates:\n{breaches.to_string()}")
        logger.info(f"Results saved to {OUTPUT_PATH}")

    except Exception as e:
        logger.error(f"Rolling fit failed: {str(e)}")
        raise
