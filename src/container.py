import logging
from typing import Optional

from config.database_config import DatabaseConfig
from config.mqtt_config import MqttConfig
from config.simulation_config import SimulationSettings
from src.binmonitoring.application.services import (
    BinService,
    SimulationEngine,
    SimulationScheduler
)
from src.binmonitoring.infrastructure.messaging import (
    EventBroadcaster,
    MqttEventPublisher,
    WebSocketHub
)
from src.binmonitoring.infrastructure.persistence import (
    BinStorage,
    MemoryBinStorage,
    PeeweeBinStorage
)
from src.binmonitoring.interfaces.rest import BinController, SimulationController
from src.shared.infrastructure.database import database, init_database
from src.shared.infrastructure.mqtt import MqttConnectionManager
from src.shared.infrastructure.websocket import WebSocketServer
from src.shared.interfaces.health_controller import HealthController

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency Injection Container

    Manages all application dependencies and their lifecycle.
    """

    def __init__(self, storage: Optional[BinStorage] = None,
                 push_mode: Optional[bool] = None,
                 mqtt_enabled: Optional[bool] = None,
                 websocket_enabled: Optional[bool] = None,
                 rng=None):
        """
        Args:
            storage: Storage backend; built from DatabaseConfig when omitted
            push_mode: Server-owned timer (default from SIMULATION_MODE)
            mqtt_enabled: Mirror events to MQTT (default from MQTT_ENABLED)
            websocket_enabled: Serve the push socket (default from WEBSOCKET_ENABLED)
            rng: Random source for the engine
        """
        logger.info("Initializing application container...")

        if push_mode is None:
            push_mode = SimulationSettings.is_push_mode()
        if mqtt_enabled is None:
            mqtt_enabled = MqttConfig.ENABLED
        if websocket_enabled is None:
            websocket_enabled = SimulationSettings.WEBSOCKET_ENABLED

        # Infrastructure - Storage
        self.storage = storage or self._create_storage()

        # Infrastructure - Fan-out
        self.broadcaster = EventBroadcaster()
        self.websocket_hub = WebSocketHub(self.storage)
        self.broadcaster.subscribe(self.websocket_hub.broadcast)

        self.websocket_server: Optional[WebSocketServer] = None
        if websocket_enabled:
            self.websocket_server = WebSocketServer(
                SimulationSettings.WEBSOCKET_HOST,
                SimulationSettings.WEBSOCKET_PORT,
                on_connect=self.websocket_hub.register,
                on_disconnect=self.websocket_hub.unregister
            )

        # Infrastructure - MQTT mirror
        self.mqtt_manager: Optional[MqttConnectionManager] = None
        self.mqtt_event_publisher: Optional[MqttEventPublisher] = None
        if mqtt_enabled:
            self.mqtt_manager = MqttConnectionManager()
            self.mqtt_event_publisher = MqttEventPublisher(self.mqtt_manager)
            self.broadcaster.subscribe(self.mqtt_event_publisher.publish_event)

        # Application Services
        self.bin_service = BinService(self.storage)
        self.engine = SimulationEngine(self.storage, self.broadcaster, rng=rng)
        self.scheduler = SimulationScheduler(
            self.storage,
            self.engine,
            self.broadcaster,
            push_mode=push_mode
        )

        # REST Controllers
        self.bin_controller = BinController(self.bin_service)
        self.simulation_controller = SimulationController(
            self.scheduler,
            self.bin_service
        )
        self.health_controller = HealthController(self)

        if SimulationSettings.SEED_DEFAULT_BIN:
            self.bin_service.seed_default_bin()

        logger.info("Application container initialized")

    def _create_storage(self) -> BinStorage:
        """Build the storage backend selected by STORAGE_BACKEND"""
        if DatabaseConfig.use_sqlite():
            try:
                init_database()
                logger.info("Using persistent SQLite bin storage")
                return PeeweeBinStorage(
                    readings_per_bin=SimulationSettings.READINGS_PER_BIN
                )
            except Exception as e:
                logger.error(f"Database connection failed: {e}", exc_info=True)
                raise

        logger.info("Using in-memory bin storage")
        return MemoryBinStorage(readings_per_bin=SimulationSettings.READINGS_PER_BIN)

    def start_background_services(self):
        """Start MQTT, the WebSocket server and resume a running simulation"""
        if self.mqtt_manager is not None:
            logger.info("Starting MQTT...")
            self.mqtt_manager.connect()

        if self.websocket_server is not None:
            self.websocket_server.start()

        self.scheduler.restore()

    def websocket_running(self) -> bool:
        return self.websocket_server is not None and self.websocket_server.is_running()

    def mqtt_connected(self) -> bool:
        return self.mqtt_manager is not None and self.mqtt_manager.is_connected()

    def shutdown(self):
        """Gracefully shutdown all components"""
        logger.info("Shutting down application...")

        logger.info("Cancelling simulation timer...")
        self.scheduler.shutdown()

        if self.websocket_server is not None:
            self.websocket_server.stop()

        if self.mqtt_manager is not None:
            logger.info("Disconnecting MQTT...")
            self.mqtt_manager.disconnect()

        if isinstance(self.storage, PeeweeBinStorage) and not database.is_closed():
            logger.info("Closing database...")
            database.close()

        logger.info("Application shutdown complete")
