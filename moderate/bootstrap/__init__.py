"""Composition root for wiring dependencies.

Infrastructure-aware wiring lives here so the API and application layers
depend on ports only.
"""
