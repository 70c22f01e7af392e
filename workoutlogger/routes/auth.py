from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from workoutlogger.errors import Unauthorized, ValidationFailure, error_response
from workoutlogger.extensions import db
from workoutlogger.schemas.auth import credentials_schema, token_schema
from workoutlogger.services.auth_gateway import AuthGateway

auth_bp = Blueprint("auth", __name__)


def _gateway():
    return AuthGateway(db.session, current_app.config)


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"msg": "Missing JSON"}), 400

    try:
        credentials = credentials_schema.load(data)
    except ValidationError:
        # Never say which field was wrong
        return error_response(Unauthorized())

    token, error = _gateway().login(credentials["username"], credentials["password"])
    if error:
        return error_response(error)
    return jsonify(token_schema.dump({"token": token})), 200


@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"msg": "Missing JSON"}), 400

    try:
        credentials = credentials_schema.load(data)
    except ValidationError as err:
        return error_response(ValidationFailure("Username and password are required.", errors=err.messages))

    token, error = _gateway().register(credentials["username"], credentials["password"])
    if error:
        return error_response(error)
    return jsonify(token_schema.dump({"token": token})), 200
