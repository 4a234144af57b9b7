"""Backend HTTP API.

Routes live under ``/<service-prefix>``. Every data route resolves the bearer
token through the identity admin and reads or replaces one whole collection
of the caller in the key-value store.
"""

import logging
import sys
from functools import wraps

from flask import Blueprint, Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ledger.config import load_settings
from ledger.errors import AuthError, ValidationError
from ledger.identity import IdentityAdmin, SupabaseAdmin
from ledger.kv_store import KVStore, SqliteKVStore, user_key
from ledger.logger import setup_logger
from ledger.validation import check_signup

logger = logging.getLogger(__name__)

COLLECTIONS = ("categories", "expenses")


def bearer_token() -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    return token.strip() if scheme.lower() == "bearer" else ""


def create_app(kv: KVStore, admin: IdentityAdmin, prefix: str = "make-server") -> Flask:
    app = Flask(__name__)
    bp = Blueprint("ledger", __name__, url_prefix=f"/{prefix.strip('/')}")

    def login_required(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            user = admin.resolve(bearer_token())
            if user is None or not user.id:
                return jsonify(error="Unauthorized"), 401
            g.user = user
            return view(*args, **kwargs)
        return wrapped

    @bp.post("/signup")
    def signup():
        body = request.get_json(silent=True) or {}
        email, password, name = body.get("email"), body.get("password"), body.get("name", "")

        checked = check_signup(email, password)
        if checked.is_left():
            return jsonify(error=checked.get_error()[0]), 400

        try:
            user = admin.create_user(email, password, name or "")
        except AuthError as e:
            logger.info("Error creating user during signup: %s", e)
            return jsonify(error=str(e)), 400

        return jsonify(
            message="User created successfully",
            user={"id": user.id, "email": user.email},
        ), 201

    def load(kind: str):
        return jsonify({kind: kv.get(user_key(g.user.id, kind)) or []})

    def save(kind: str):
        body = request.get_json(silent=True) or {}
        records = body.get(kind)
        if not isinstance(records, list):
            return jsonify(error=f"{kind} must be a list"), 400
        kv.set(user_key(g.user.id, kind), records)
        logger.debug("Stored %d %s for user %s", len(records), kind, g.user.id)
        return jsonify(message=f"{kind.capitalize()} saved successfully")

    for kind in COLLECTIONS:
        bp.add_url_rule(f"/{kind}", f"get_{kind}", login_required(lambda kind=kind: load(kind)), methods=["GET"])
        bp.add_url_rule(f"/{kind}", f"save_{kind}", login_required(lambda kind=kind: save(kind)), methods=["POST"])

    app.register_blueprint(bp)

    @app.errorhandler(Exception)
    def unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify(error=e.description), e.code
        logger.error("Unexpected error on %s %s: %s", request.method, request.path, e, exc_info=True)
        return jsonify(error="Failed to process request"), 500

    return app


def main() -> None:
    settings = load_settings()
    log = setup_logger(__name__, settings.log_level)

    try:
        settings.validate()
    except ValidationError as e:
        log.error("Invalid configuration: %s", e)
        sys.exit(1)

    app = create_app(
        SqliteKVStore(settings.kv_path),
        SupabaseAdmin(settings.auth_url, settings.service_key, timeout=settings.http_timeout),
        settings.service_prefix,
    )
    log.info("Serving ledger API under /%s", settings.service_prefix)
    app.run()


if __name__ == "__main__":
    main()
