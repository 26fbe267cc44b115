from .enums import (
    UserRole, AssetType, UploadType, AssetStatus, Visibility, ShareTarget,
    ApprovalAction, AuditAction, ResourceType, NotificationType, Platform,
)
from .company import Company
from .user import User
from .asset import Asset
from .share import AssetShare
from .approval import Approval
from .audit import AuditLog
from .notification import Notification
from .usage import PlatformUsage
