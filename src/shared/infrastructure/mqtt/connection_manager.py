import json
import logging
import threading

import paho.mqtt.client as mqtt

from config.mqtt_config import MqttConfig

logger = logging.getLogger(__name__)


class MqttConnectionManager:
    """
    Publish-only MQTT connection used to mirror simulation events

    The connection is opened asynchronously: the service keeps serving HTTP
    while the broker is unreachable, and paho's network loop retries with
    exponential backoff between RECONNECT_MIN_DELAY and RECONNECT_MAX_DELAY.
    Messages published while disconnected are dropped, not queued.
    """

    def __init__(self, host: str = None, port: int = None, client_id: str = None):
        """
        Args:
            host: Broker host (default MqttConfig.BROKER_HOST)
            port: Broker port (default MqttConfig.BROKER_PORT)
            client_id: MQTT client id (default MqttConfig.CLIENT_ID)
        """
        self.host = host or MqttConfig.BROKER_HOST
        self.port = port or MqttConfig.BROKER_PORT

        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id or MqttConfig.CLIENT_ID
        )
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.reconnect_delay_set(
            min_delay=MqttConfig.RECONNECT_MIN_DELAY,
            max_delay=MqttConfig.RECONNECT_MAX_DELAY
        )

        if MqttConfig.has_authentication():
            self.client.username_pw_set(MqttConfig.USERNAME, MqttConfig.PASSWORD)

        self._connected = threading.Event()
        self._loop_started = False

    def connect(self):
        """Start connecting in the background; returns immediately"""
        if self._loop_started:
            return

        logger.info(f"Connecting to MQTT broker {self.host}:{self.port}")
        try:
            self.client.connect_async(self.host, self.port, MqttConfig.KEEP_ALIVE)
        except ValueError as e:
            logger.error(f"Invalid MQTT broker settings: {e}")
            return

        self.client.loop_start()
        self._loop_started = True

    def wait_until_connected(self, timeout: float) -> bool:
        """Block up to `timeout` seconds for the first successful connect"""
        return self._connected.wait(timeout)

    def disconnect(self):
        """Close the connection and stop the network loop"""
        if not self._loop_started:
            return

        self.client.disconnect()
        self.client.loop_stop()
        self._loop_started = False
        self._connected.clear()
        logger.info("Disconnected from MQTT broker")

    def publish(self, topic: str, payload: dict, retain: bool = False) -> bool:
        """
        Publish a JSON payload

        Args:
            topic: Destination topic
            payload: Message body, serialized with json.dumps
            retain: Ask the broker to keep it as the topic's last message

        Returns:
            True if the message was handed to the client, False otherwise
        """
        if not self.is_connected():
            logger.debug(f"MQTT offline, dropping message for {topic}")
            return False

        message = json.dumps(payload, default=str)
        info = self.client.publish(topic, message, qos=MqttConfig.QOS_PUBLISH, retain=retain)

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(f"MQTT publish to {topic} failed: {mqtt.error_string(info.rc)}")
            return False

        logger.debug(f"MQTT {topic} <- {message[:200]}")
        return True

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            logger.error(f"MQTT broker refused connection: {reason_code}")
            return

        self._connected.set()
        logger.info(f"MQTT connected to {self.host}:{self.port}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        self._connected.clear()

        if reason_code.is_failure:
            # loop_start() keeps retrying with backoff
            logger.warning(f"MQTT connection lost ({reason_code}), retrying")
        else:
            logger.info("MQTT disconnected")

    def is_connected(self) -> bool:
        return self._connected.is_set()
