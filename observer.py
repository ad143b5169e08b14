import argparse
import logging
import signal
import sys
import time

from config.simulation_config import SimulationSettings
from src.binmonitoring.domain.model.events import DomainEvent
from src.binmonitoring.interfaces.polling import (
    HttpStateSource,
    PollingObserver,
    PollingWorker
)
from src.shared.infrastructure.logging import setup_logging

logger = logging.getLogger(__name__)


def log_event(event: DomainEvent):
    """Print every synthesized event as a JSON line"""
    logger.info(event.to_json())


def main():
    """
    Poll a Dustbin Monitor API and log the events a push client would see

    Intended for deployments without a WebSocket (e.g. serverless), where
    the observer also drives the simulation by triggering ticks.
    """
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument('--url', default=SimulationSettings.API_BASE_URL,
                        help='API root, e.g. http://localhost:5000/api')
    parser.add_argument('--interval', type=float,
                        default=SimulationSettings.POLL_INTERVAL,
                        help='Seconds between polls')
    args = parser.parse_args()

    setup_logging()

    observer = PollingObserver(HttpStateSource(args.url), on_event=log_event)
    worker = PollingWorker(observer, args.interval)

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}, stopping observer...")
        worker.stop(wait=True)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(f"Polling {args.url} every {args.interval}s")
    worker.start()

    while worker.is_running():
        time.sleep(1)


if __name__ == '__main__':
    main()
