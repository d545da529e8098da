"""External interfaces of the gateway."""
