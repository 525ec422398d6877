"""
Observability module for AI Bridge.

Structured logging only: facades emit event-style log records with
provider/model context and leave formatting to configure_logging().
"""
