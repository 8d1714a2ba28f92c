from __future__ import annotations
import logging, logging.config
from pathlib import Path
import yaml

from listingview.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(config_path: str | None = None) -> None:
    """
    Load logging.yaml from a few sensible locations and fall back to basicConfig.
    Search order:
      1) explicit config_path arg (if provided)
      2) same folder as this file  (listingview/logging.yaml)
      3) project root (two levels up, next to src/) (../../logging.yaml)
      4) current working directory (logging.yaml)
    """
    candidates: list[Path] = []
    if config_path:
        candidates.append(Path(config_path))

    here = Path(__file__).resolve().parent
    candidates.extend([
        here / "logging.yaml",
        here.parents[1] / "logging.yaml",
        Path.cwd() / "logging.yaml",
    ])

    failures: list[str] = []
    for p in candidates:
        if not p.exists():
            continue
        try:
            with open(p, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            logging.config.dictConfig(config)
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            # try next candidate
            failures.append(f"{p}: {e}")
            continue
        logging.getLogger("listingview").info(f"Loaded logging config from {p}")
        return

    # Fallback if none found/loaded
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
    logger = logging.getLogger("listingview")
    for failure in failures:
        logger.warning(f"Could not load logging config {failure}")
    logger.warning("logging.yaml not found; using basicConfig")
