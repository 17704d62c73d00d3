"""
Smoke tests to verify all critical dependencies are installed correctly.

These tests confirm that:
1. Python 3.11+ is installed
2. All core dependencies are importable
3. Project version is accessible

Run with: pytest tests/unit/test_smoke.py -v
"""

import sys


class TestPythonVersion:
    def test_python_311_or_higher(self) -> None:
        assert sys.version_info >= (3, 11), (
            f"Python 3.11+ required, got {sys.version_info.major}.{sys.version_info.minor}"
        )


class TestCoreFramework:
    """Verify core framework dependencies."""

    def test_fastapi_import(self) -> None:
        from fastapi import FastAPI

        assert FastAPI() is not None

    def test_pydantic_v2(self) -> None:
        """Pydantic v2 must be installed (required for the response models)."""
        import pydantic

        major_version = int(pydantic.VERSION.split(".")[0])
        assert major_version >= 2, f"Pydantic v2 required, got {pydantic.VERSION}"


class TestDatabase:
    def test_sqlalchemy_async(self) -> None:
        """SQLAlchemy 2.0+ async mode must be available."""
        from sqlalchemy import __version__ as sa_version
        from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

        major_version = int(sa_version.split(".")[0])
        assert major_version >= 2, f"SQLAlchemy 2.0+ required, got {sa_version}"
        assert AsyncSession is not None
        assert create_async_engine is not None

    def test_asyncpg_import(self) -> None:
        import asyncpg

        assert asyncpg.connect is not None


class TestObservability:
    def test_structlog_bind(self) -> None:
        import structlog

        bound_logger = structlog.get_logger().bind(queue_id=1, operation="test")
        assert bound_logger is not None

    def test_prometheus_client(self) -> None:
        from prometheus_client import CollectorRegistry, Counter

        registry = CollectorRegistry()
        Counter("smoke_total", "Smoke counter", registry=registry).inc()
        assert registry.get_sample_value("smoke_total") == 1.0


class TestProjectVersion:
    def test_version_format(self, project_version: str) -> None:
        """Version must be in semver format."""
        parts = project_version.split(".")
        assert len(parts) == 3, f"Version must be semver format, got {project_version}"
