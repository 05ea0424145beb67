"""Terminal UI, event bus, and log forwarding."""
