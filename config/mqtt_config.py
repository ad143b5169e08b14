import os
from dotenv import load_dotenv

load_dotenv()


class MqttConfig:
    """
    MQTT configuration for mirroring simulation events to a broker

    Topics Structure:
    - dustbin/bins/<binId>/update → binUpdate events
    - dustbin/alerts              → alert events
    - dustbin/simulation/status   → simulationStatus events (retained)
    """

    # Disabled unless a broker is explicitly configured
    ENABLED = os.getenv('MQTT_ENABLED', 'False').lower() == 'true'

    # ========================================
    # Broker Configuration
    # ========================================
    BROKER_HOST = os.getenv('MQTT_BROKER_HOST', 'localhost')
    BROKER_PORT = int(os.getenv('MQTT_BROKER_PORT', 1883))

    # Client ID (unique per instance)
    CLIENT_ID = os.getenv('MQTT_CLIENT_ID', 'dustbin-monitor-001')

    # Authentication (empty for no auth)
    USERNAME = os.getenv('MQTT_USERNAME', '')
    PASSWORD = os.getenv('MQTT_PASSWORD', '')

    # ========================================
    # Topics - PUBLISH
    # ========================================
    TOPIC_BIN_UPDATE = 'dustbin/bins/{bin_id}/update'
    TOPIC_ALERT = 'dustbin/alerts'
    TOPIC_SIMULATION_STATUS = 'dustbin/simulation/status'

    # ========================================
    # QoS Levels
    # ========================================
    QOS_PUBLISH = 1  # At least once

    # ========================================
    # Connection Settings
    # ========================================
    KEEP_ALIVE = 60  # Seconds
    RECONNECT_MIN_DELAY = 1  # Seconds, doubled after each failed attempt
    RECONNECT_MAX_DELAY = 60

    @classmethod
    def has_authentication(cls) -> bool:
        """Check if MQTT authentication is configured."""
        return bool(cls.USERNAME and cls.PASSWORD)
