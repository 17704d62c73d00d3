"""HTTP API for the moderation queue."""
