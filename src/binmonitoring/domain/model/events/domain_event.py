import json
from typing import ClassVar


class DomainEvent:
    """
    Base class for events delivered to observers

    Every event is serialized as {"type": <event_type>, "data": {...}}
    regardless of the transport (WebSocket, polling, MQTT).
    """

    event_type: ClassVar[str] = ''

    def to_dict(self) -> dict:
        raise NotImplementedError

    def to_message(self) -> dict:
        return {'type': self.event_type, 'data': self.to_dict()}

    def to_json(self) -> str:
        return json.dumps(self.to_message(), default=str)
