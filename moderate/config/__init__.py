"""Configuration module for the moderation queue.

Available Configurations:
- ModerationConfig: thresholds, notification toggles, paging
- AntispamConfig: queue admission rate limit
"""

from moderate.config.moderation_config import (
    DEFAULT_ANTISPAM_CONFIG,
    DEFAULT_MODERATION_CONFIG,
    RETENTION_DAYS,
    TEST_ANTISPAM_CONFIG,
    TEST_MODERATION_CONFIG,
    AntispamConfig,
    ModerationConfig,
)

__all__ = [
    "AntispamConfig",
    "DEFAULT_ANTISPAM_CONFIG",
    "DEFAULT_MODERATION_CONFIG",
    "ModerationConfig",
    "RETENTION_DAYS",
    "TEST_ANTISPAM_CONFIG",
    "TEST_MODERATION_CONFIG",
]
