"""Presentation layer: HTTP API and WebSocket channel."""

from personachat.presentation.api_handlers import register_api_routes
from personachat.presentation.app import create_app
from personachat.presentation.websocket_handlers import (
    WebSocketEmitter,
    create_websocket_handler,
    dispatch_frame,
)

__all__ = [
    "WebSocketEmitter",
    "create_app",
    "create_websocket_handler",
    "dispatch_frame",
    "register_api_routes",
]
