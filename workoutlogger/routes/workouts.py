from flask import Blueprint, jsonify, request, url_for

from workoutlogger.errors import ValidationFailure, error_response
from workoutlogger.extensions import db
from workoutlogger.schemas.workout import validate_record, workout_schema, workouts_schema
from workoutlogger.services.workout_store import WorkoutStore
from workoutlogger.utils.decorators import inject_current_user

workouts_bp = Blueprint("workouts", __name__)


def _store():
    return WorkoutStore(db.session)


# =========================================================
# Records (strength workouts, cardio sessions, weigh-ins)
# =========================================================

@workouts_bp.route("", methods=["GET"])
@inject_current_user
def list_workouts(current_user):
    workouts = _store().list(current_user.id)
    return jsonify(workouts_schema.dump(workouts)), 200


@workouts_bp.route("", methods=["POST"])
@inject_current_user
def create_workout(current_user):
    record, error = validate_record(request.get_json(silent=True))
    if error:
        return error_response(error)

    workout, error = _store().create(current_user.id, record)
    if error:
        return error_response(error)

    response = jsonify(workout_schema.dump(workout))
    response.headers["Location"] = url_for("workouts.list_workouts")
    return response, 201


@workouts_bp.route("/<int(max=2147483647):workout_id>", methods=["PUT"])
@inject_current_user
def update_workout(workout_id, current_user):
    record, error = validate_record(request.get_json(silent=True))
    if error:
        return error_response(error)
    if record.get("id") is not None and record["id"] != workout_id:
        return error_response(ValidationFailure("Record ID mismatch."))

    _, error = _store().update(current_user.id, workout_id, record)
    if error:
        return error_response(error)
    return "", 204


@workouts_bp.route("/<int(max=2147483647):workout_id>", methods=["DELETE"])
@inject_current_user
def delete_workout(workout_id, current_user):
    _, error = _store().delete(current_user.id, workout_id)
    if error:
        return error_response(error)
    return "", 204
