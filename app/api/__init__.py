"""HTTP API for Deploy Relay."""
