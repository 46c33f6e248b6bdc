"""
Shared DTOs for the Synergy platform.

Used by both the backend (request/response validation, WebSocket events)
and the CLI client (parsing server frames and REST responses).
"""
