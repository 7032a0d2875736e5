"""Feature modules exposing the HTTP API."""
