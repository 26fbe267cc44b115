# assetdesk/exceptions.py
"""Domain errors raised by the services.

Every error is scoped to the single operation that raised it. The HTTP-ish
``status_code`` lets a caller pick 400/403/404/409 without inspecting the
message text.
"""


class AssetDeskError(Exception):
    status_code = 400

    def __init__(self, message: str, *, fields: dict | None = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.fields:
            body["fields"] = dict(self.fields)
        return body


class ValidationError(AssetDeskError):
    status_code = 400


class AuthorizationError(AssetDeskError):
    status_code = 403


class NotFoundError(AssetDeskError):
    status_code = 404


class StateConflictError(AssetDeskError):
    status_code = 409
