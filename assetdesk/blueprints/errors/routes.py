import logging
from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from ...exceptions import AssetDeskError
from ...extensions import db
from . import errors_bp

log = logging.getLogger(__name__)


def _rollback():
    # leave the session usable for the next request
    try:
        db.session.rollback()
    except SQLAlchemyError:
        log.exception("rollback failed")


# Domain errors: 400 / 403 / 404 / 409
@errors_bp.app_errorhandler(AssetDeskError)
def err_domain(e: AssetDeskError):
    if e.status_code >= 403:
        log.info("%s %s -> %s: %s", request.method, request.path, e.status_code, e.message)
    return jsonify(e.to_dict()), e.status_code


# Fallback for uncaught HTTPException
@errors_bp.app_errorhandler(HTTPException)
def err_http(e: HTTPException):
    return jsonify({"error": e.description or e.name}), e.code


# Last-resort: any other Exception
@errors_bp.app_errorhandler(Exception)
def err_unexpected(e):
    _rollback()
    log.exception("unhandled error on %s %s", request.method, request.path)
    # Don't leak internals
    return jsonify({"error": "Internal server error"}), 500
