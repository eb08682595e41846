"""
Build the Catala static bundle.

Usage:
  python -m catala_wasm
  catala-wasm-build

Configuration comes from CATALA_WASM_* environment variables (see config.py).
"""

import logging
import sys

from catala_wasm.config import settings
from catala_wasm.errors import PipelineError
from catala_wasm.pipeline import run

logger = logging.getLogger("catala_wasm")


def main() -> int:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )
    try:
        run(settings)
    except (PipelineError, OSError) as e:
        logger.error("Build failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
