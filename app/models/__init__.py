from app.models.user import User
from app.models.post import Post, PostCategory, PostDraft
from app.models.audit_log import AuditLog
from app.models.failed_job import FailedJob

__all__ = [
    "User",
    "Post",
    "PostCategory",
    "PostDraft",
    "AuditLog",
    "FailedJob",
]
