import logging
from typing import List

import requests

from config.simulation_config import SimulationSettings
from src.binmonitoring.application.services import BinService, SimulationScheduler
from src.binmonitoring.domain.model.aggregates import Bin, SimulationConfig

logger = logging.getLogger(__name__)


class ServiceStateSource:
    """
    State source reading directly from in-process services

    Adapter for embedding a PollingObserver next to the services, e.g. in a
    test suite or a script that builds its own Container. The server never
    wires one: pull deployments poll over HTTP with HttpStateSource.
    """

    def __init__(self, bin_service: BinService, scheduler: SimulationScheduler):
        self.bin_service = bin_service
        self.scheduler = scheduler

    def fetch_config(self) -> SimulationConfig:
        return self.bin_service.get_simulation_config()

    def fetch_bins(self) -> List[Bin]:
        return self.bin_service.get_all_bins()

    def trigger_tick(self) -> bool:
        return self.scheduler.trigger().updated


class HttpStateSource:
    """
    State source reading the REST API of a (possibly serverless) deployment

    Endpoints used:
    - GET  /simulation/config
    - GET  /bins
    - POST /simulation/trigger
    """

    def __init__(self, base_url: str = SimulationSettings.API_BASE_URL,
                 timeout: float = SimulationSettings.HTTP_TIMEOUT,
                 session: requests.Session = None):
        """
        Args:
            base_url: API root, e.g. http://localhost:5000/api
            timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_config(self) -> SimulationConfig:
        response = self.session.get(
            f"{self.base_url}/simulation/config", timeout=self.timeout
        )
        response.raise_for_status()
        return SimulationConfig.from_dict(response.json())

    def fetch_bins(self) -> List[Bin]:
        response = self.session.get(f"{self.base_url}/bins", timeout=self.timeout)
        response.raise_for_status()
        return [Bin.from_dict(item) for item in response.json()]

    def trigger_tick(self) -> bool:
        response = self.session.post(
            f"{self.base_url}/simulation/trigger", timeout=self.timeout
        )
        response.raise_for_status()
        return bool(response.json().get('updated', False))
