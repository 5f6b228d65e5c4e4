"""HTTP layer: session join/leave events and config access."""
