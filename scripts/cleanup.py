# Path: scripts/cleanup.py
# Purpose: Maintenance CLI that removes generated derivative files from a home folder.
# Layer: scripts.
# Details: Marker tags come from the config file when given, otherwise the defaults are used.

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings, ImageResizingSettings
from core.errors import FotodeckError
from core.indexing import remove_derivatives

logger = logging.getLogger("fotodeck.helper")

COMMANDS = ("cleanup",)


def main(argv: Optional[List[str]] = None) -> int:
    """Run a maintenance command against a home folder."""

    parser = argparse.ArgumentParser(prog="fotodeck-helper", description="fotodeck maintenance commands")
    parser.add_argument("command", choices=COMMANDS, help="Maintenance command to run")
    parser.add_argument("home", type=Path, help="Home folder containing the photos")
    parser.add_argument("--config", type=Path, default=None, help="Config file providing the marker tags")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    try:
        resizing = AppSettings.load(args.config).image_resizing if args.config else ImageResizingSettings()
        logger.info("Cleaning up image derivatives in %s", args.home)
        removed = remove_derivatives(args.home, resizing.markers)
    except FotodeckError as exc:
        logger.error("Error cleaning up %s: %s", args.home, exc)
        return 1

    logger.info("Removed %d derivative files", removed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
