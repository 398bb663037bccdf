import logging
import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.environ.get("MOVIE_RECS_DATA_DIR", BASE_DIR / "data"))
RAW_DATA_DIR = DATA_DIR / "raw"
PROCESSED_DATA_DIR = DATA_DIR / "processed"
LOGS_DIR = BASE_DIR / "logs"
PLOTS_DIR = BASE_DIR / "plots"

MOVIES_CANDIDATES = [PROCESSED_DATA_DIR / "items.csv", DATA_DIR / "movies.csv"]

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(log_name, level=logging.INFO):
    """File log under logs/ plus console output, for script entry points."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=LOGS_DIR / log_name,
        level=level,
        format=LOG_FORMAT,
        filemode="a",
    )
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(console)


def find_movies_csv():
    for path in MOVIES_CANDIDATES:
        if path.exists():
            return path
    return None
