"""Infrastructure layer: stores, collaborator stubs and observability."""
