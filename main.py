import time
import logging
import signal
import argparse

from core.config_loader import load_config
from core.auto_selection import run_auto_selection_sweep
from database.database import make_engine, make_session_factory
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True

def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False

signal.signal(signal.SIGINT, signal_handler)
signal.signal(signal.SIGTERM, signal_handler)


def run_cycle(config, session_factory):
    cycle_start = time.time()
    report = run_auto_selection_sweep(config.selection, session_factory=session_factory)
    cycle_elapsed = time.time() - cycle_start
    logger.info(f"=== Cycle Completed in {cycle_elapsed:.2f}s ({report.due} due) ===")
    return report


def main():
    parser = argparse.ArgumentParser(description="RoastMarket auto-selection scheduler")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--once', action='store_true', help='Run a single sweep and exit')
    args = parser.parse_args()

    config = load_config(args.config)
    logger.info(
        f"Scheduler starting: auto-select after {config.selection.auto_select_delay_hours}h, "
        f"sweep every {config.selection.sweep_interval_seconds}s"
    )

    engine = make_engine(config.database.url)
    session_factory = make_session_factory(engine)

    # Initialize DB (with retry logic)
    init_db(engine)

    if args.once:
        run_cycle(config, session_factory)
        return

    while running:
        try:
            run_cycle(config, session_factory)
        except Exception as e:
            logger.error(f"Sweep failed: {e}", exc_info=True)

        # Sleep in short steps so a shutdown signal is honoured promptly
        waited = 0
        while running and waited < config.selection.sweep_interval_seconds:
            time.sleep(1)
            waited += 1

    logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()
