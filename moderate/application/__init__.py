"""Application layer: ports and services for the moderation queue."""
