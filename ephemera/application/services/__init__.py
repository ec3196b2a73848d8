"""Application services - use case implementations."""

from .action_guard import ActionGuard, ActionResult, RequestContext, require_user
from .audit_service import AuditLogger, escape_preview, mask_email
from .auth_service import AuthService
from .marker_service import MarkerService
from .page_service import ImageUpload, PageService, UploadPolicy
from .rate_limit_sweeper import RateLimitSweeper
from .timeline_service import TimelineService

__all__ = [
    "ActionGuard",
    "ActionResult",
    "RequestContext",
    "require_user",
    "AuditLogger",
    "escape_preview",
    "mask_email",
    "AuthService",
    "MarkerService",
    "ImageUpload",
    "PageService",
    "UploadPolicy",
    "RateLimitSweeper",
    "TimelineService",
]
