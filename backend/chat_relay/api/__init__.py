"""Transport layer: HTTP routes and the WebSocket stream."""
