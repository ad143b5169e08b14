from .event_broadcaster import EventBroadcaster
from .websocket_hub import WebSocketHub
from .mqtt_event_publisher import MqttEventPublisher

__all__ = [
    'EventBroadcaster',
    'WebSocketHub',
    'MqttEventPublisher'
]
