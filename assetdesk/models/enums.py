# assetdesk/models/enums.py
import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CONTENT_CREATOR = "CONTENT_CREATOR"
    SEO_SPECIALIST = "SEO_SPECIALIST"


class AssetType(str, enum.Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    DOCUMENT = "DOCUMENT"
    LINK = "LINK"


class UploadType(str, enum.Enum):
    SEO = "SEO"
    DOC = "DOC"


class AssetStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Visibility(str, enum.Enum):
    UPLOADER_ONLY = "UPLOADER_ONLY"
    ADMIN_ONLY = "ADMIN_ONLY"
    COMPANY = "COMPANY"
    TEAM = "TEAM"  # reserved until a team model exists
    ROLE = "ROLE"
    SELECTED_USERS = "SELECTED_USERS"
    PUBLIC = "PUBLIC"


# Doc uploads never leave these two modes
DOC_VISIBILITIES = frozenset({Visibility.UPLOADER_ONLY, Visibility.SELECTED_USERS})
SHAREABLE_VISIBILITIES = DOC_VISIBILITIES


class ShareTarget(str, enum.Enum):
    USER = "USER"
    ROLE = "ROLE"
    TEAM = "TEAM"


class ApprovalAction(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    DOWNLOAD = "DOWNLOAD"
    SHARE = "SHARE"
    VISIBILITY_CHANGE = "VISIBILITY_CHANGE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class ResourceType(str, enum.Enum):
    ASSET = "ASSET"
    USER = "USER"
    COMPANY = "COMPANY"
    APPROVAL = "APPROVAL"


class NotificationType(str, enum.Enum):
    ASSET_UPLOADED = "ASSET_UPLOADED"
    ASSET_APPROVED = "ASSET_APPROVED"
    ASSET_REJECTED = "ASSET_REJECTED"
    ASSET_SHARED = "ASSET_SHARED"
    COMMENT_ADDED = "COMMENT_ADDED"
    SYSTEM_ALERT = "SYSTEM_ALERT"


class Platform(str, enum.Enum):
    X = "X"
    LINKEDIN = "LINKEDIN"
    INSTAGRAM = "INSTAGRAM"
    META_ADS = "META_ADS"
    YOUTUBE = "YOUTUBE"


def enum_type(enum_cls, length: int = 32):
    """String-backed column type for one of the enums above (no native DB enum)."""
    from ..extensions import db
    return db.Enum(enum_cls, native_enum=False, length=length, validate_strings=True)
