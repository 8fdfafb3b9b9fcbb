import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


def setup_logging(output_dir: Optional[Path] = None, name: str = "armagarch",
                  level: int = logging.INFO) -> logging.Logger:
    """
    Configure logging with console and optional file handlers

    Parameters:
    -----------
    output_dir : Path, optional
        Directory for the log file; console only when omitted
    name : str
        Logger to configure; child loggers propagate to it
    level : int
        Logging level

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if output_dir is not None:
        log_dir = Path(output_dir) / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(log_dir / f"{name}_{timestamp}.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console_handler)

    return logger
