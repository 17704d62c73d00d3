"""Domain layer: queue entry models, access levels and errors (no I/O)."""
