from .websocket_server import WebSocketServer

__all__ = ['WebSocketServer']
