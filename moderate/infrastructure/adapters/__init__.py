"""Production adapters for the moderation ports."""

from moderate.infrastructure.adapters.system_time_authority import SystemTimeAuthority

__all__ = ["SystemTimeAuthority"]
