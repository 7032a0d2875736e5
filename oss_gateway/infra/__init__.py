"""Infrastructure adapters: logging, metrics, tracing and object storage."""
