"""
Entry point: ``python -m lyngsat_wayback``.

Runs the full pipeline with the default configuration. Exits 0 once the run
completes, even when individual pages failed, and 1 on an unhandled error.
"""

import sys

from .core.controller import ArchiveController, RunConfig
from .core.logger import initialize_logging, get_logger


def main() -> int:
    config = RunConfig()
    initialize_logging(config.log_dir)
    logger = get_logger('main')

    controller = None
    try:
        controller = ArchiveController(config)
        controller.run()
    except Exception:
        logger.exception("An error occurred")
        return 1
    finally:
        if controller is not None:
            controller.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
