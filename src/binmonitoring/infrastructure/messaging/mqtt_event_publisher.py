import logging
from datetime import datetime

from config.mqtt_config import MqttConfig
from src.binmonitoring.domain.model.events import (
    AlertEvent,
    BinUpdateEvent,
    DomainEvent,
    SimulationStatusEvent
)
from src.shared.infrastructure.mqtt import MqttConnectionManager

logger = logging.getLogger(__name__)


class MqttEventPublisher:
    """
    MQTT mirror of the simulation event stream

    Publishes to topics:
    - dustbin/bins/<binId>/update - every binUpdate
    - dustbin/alerts - every alert
    - dustbin/simulation/status - simulationStatus (retained)

    Payload format:
    {
        "type": "binUpdate",
        "data": {...},
        "publishedAt": "2025-01-15T10:30:06"
    }
    """

    def __init__(self, mqtt_manager: MqttConnectionManager):
        """
        Initialize publisher with MQTT connection

        Args:
            mqtt_manager: Shared MQTT connection manager
        """
        self.mqtt_manager = mqtt_manager

    def publish_event(self, event: DomainEvent) -> bool:
        """
        Event listener: publish one event to its topic

        Returns:
            True if published successfully, False otherwise
        """
        topic, retain = self._route(event)
        if topic is None:
            logger.warning(f"No MQTT topic for event type {event.event_type}")
            return False

        payload = dict(event.to_message(), publishedAt=datetime.now().isoformat())

        success = self.mqtt_manager.publish(topic=topic, payload=payload, retain=retain)
        if not success:
            logger.debug(f"{event.event_type} not mirrored to MQTT ({topic})")
        return success

    def _route(self, event: DomainEvent):
        if isinstance(event, BinUpdateEvent):
            return MqttConfig.TOPIC_BIN_UPDATE.format(bin_id=event.bin_id), False
        if isinstance(event, AlertEvent):
            return MqttConfig.TOPIC_ALERT, False
        if isinstance(event, SimulationStatusEvent):
            # Retained so late subscribers see the current status
            return MqttConfig.TOPIC_SIMULATION_STATUS, True
        return None, False

    def is_connected(self) -> bool:
        return self.mqtt_manager.is_connected()
