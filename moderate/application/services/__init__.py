"""Application services for the moderation queue."""

from moderate.application.services.admission_control_service import (
    AdmissionControlService,
)
from moderate.application.services.base import LoggingMixin
from moderate.application.services.bypass_policy_service import BypassPolicyService
from moderate.application.services.moderation_service import ModerationService
from moderate.application.services.submission_service import SubmissionGateService
from moderate.application.services.visibility_service import VisibilityService

__all__ = [
    "AdmissionControlService",
    "BypassPolicyService",
    "LoggingMixin",
    "ModerationService",
    "SubmissionGateService",
    "VisibilityService",
]
