"""HTTP API exposing the latest usage snapshots."""
