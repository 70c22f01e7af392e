from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from workoutlogger.errors import ValidationFailure, error_response
from workoutlogger.extensions import db
from workoutlogger.schemas.auth import guest_login_schema, token_schema
from workoutlogger.services.auth_gateway import AuthGateway

guest_auth_bp = Blueprint("guest_auth", __name__)


@guest_auth_bp.route("/login", methods=["POST"])
def guest_login():
    data = request.get_json(silent=True)
    try:
        body = guest_login_schema.load(data if isinstance(data, dict) else {})
    except ValidationError as err:
        return error_response(ValidationFailure("GuestId is required.", errors=err.messages))

    gateway = AuthGateway(db.session, current_app.config)
    token, error = gateway.guest_login(body["guest_id"])
    if error:
        return error_response(error)
    return jsonify(token_schema.dump({"token": token})), 200
