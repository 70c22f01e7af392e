"""Record validation for the ``workouts`` table.

One flat table stores three kinds of record. The schema below accepts the
flat JSON shape, checks the fields the declared kind requires, and clears
every variant field that kind does not use, so what reaches the store is
always one of the three closed shapes:

=================  ===============================================
kind               fields kept (all others cleared to ``None``)
=================  ===============================================
StrengthWorkout    exercise, sets > 0, reps > 0, weight >= 0
Cardio             exercise, miles > 0, duration
WeighIn            weight > 0
=================  ===============================================

The same schema runs on create and on update.
"""
import re
from datetime import timedelta, timezone

from marshmallow import (
    EXCLUDE,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates_schema,
)

from workoutlogger.errors import ValidationFailure
from workoutlogger.extensions import ma
from workoutlogger.models.workout import VARIANT_FIELDS, WorkoutKind

# Older clients send the strength kind as plain "Workout"
KIND_ALIASES = {"Workout": WorkoutKind.STRENGTH}


def _alias_of(kind):
    return KIND_ALIASES.get(kind) if isinstance(kind, str) else None


# Largest value an INTEGER column holds on every supported backend
MAX_INT = 2**31 - 1
# Longest interval accepted for a single session
MAX_DURATION = timedelta(days=365)


_DURATION_RE = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d+):(?P<minutes>[0-5]?\d):(?P<seconds>[0-5]?\d(?:\.\d+)?)$"
)


class Duration(fields.Field):
    """Elapsed time as ``HH:MM:SS`` on the wire and ``timedelta`` in Python.

    Input may also be ``D.HH:MM:SS`` or a plain number of seconds.
    """

    default_error_messages = {
        "invalid": "Not a valid duration. Use HH:MM:SS.",
        "negative": "Duration cannot be negative.",
        "too_long": "Duration cannot exceed 365 days.",
    }

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        total = int(value.total_seconds())
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            raise self.make_error("invalid")
        if isinstance(value, (int, float)):
            if value < 0:
                raise self.make_error("negative")
            return self._bounded(seconds=value)
        if not isinstance(value, str):
            raise self.make_error("invalid")
        match = _DURATION_RE.match(value.strip())
        if not match:
            raise self.make_error("invalid")
        parts = match.groupdict()
        return self._bounded(
            days=int(parts["days"] or 0),
            hours=int(parts["hours"]),
            minutes=int(parts["minutes"]),
            seconds=float(parts["seconds"]),
        )

    def _bounded(self, **parts):
        try:
            duration = timedelta(**parts)
        except (OverflowError, ValueError) as error:
            raise self.make_error("invalid") from error
        if duration > MAX_DURATION:
            raise self.make_error("too_long")
        return duration


def _present(value):
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def _positive(value):
    return value is not None and value > 0


def _non_negative(value):
    return value is not None and value >= 0


# kind -> (field, check, message when the check fails)
KIND_RULES = {
    WorkoutKind.STRENGTH: (
        ("exercise", _present, "Exercise is required."),
        ("sets", _positive, "Sets must be greater than 0."),
        ("reps", _positive, "Reps must be greater than 0."),
        # Zero is allowed here for bodyweight movements
        ("weight", _non_negative, "Weight is required and cannot be negative."),
    ),
    WorkoutKind.CARDIO: (
        ("exercise", _present, "Exercise is required."),
        ("miles", _positive, "Miles must be greater than 0."),
        ("duration", _present, "Duration is required."),
    ),
    WorkoutKind.WEIGH_IN: (
        ("weight", _positive, "Weight must be greater than 0."),
    ),
}

KIND_SUMMARIES = {
    WorkoutKind.STRENGTH: "StrengthWorkout requires exercise, sets (>0), reps (>0) and weight.",
    WorkoutKind.CARDIO: "Cardio requires exercise, miles (>0) and duration.",
    WorkoutKind.WEIGH_IN: "WeighIn requires weight (>0).",
}


class WorkoutSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Integer(strict=True, allow_none=True, validate=validate.Range(max=MAX_INT))
    user_id = fields.Integer(dump_only=True)
    date = fields.DateTime(allow_none=True)
    kind = fields.String(
        required=True,
        validate=validate.OneOf(WorkoutKind.ALL, error="Invalid kind value."),
    )
    exercise = fields.String(allow_none=True, validate=validate.Length(max=150))
    sets = fields.Integer(strict=True, allow_none=True, validate=validate.Range(max=MAX_INT))
    reps = fields.Integer(strict=True, allow_none=True, validate=validate.Range(max=MAX_INT))
    weight = fields.Float(allow_none=True)
    miles = fields.Float(allow_none=True)
    duration = Duration(allow_none=True)

    @pre_load
    def resolve_kind_alias(self, data, **kwargs):
        if isinstance(data, dict) and _alias_of(data.get("kind")):
            data = dict(data, kind=_alias_of(data["kind"]))
        return data

    @validates_schema
    def validate_kind_fields(self, data, **kwargs):
        rules = KIND_RULES.get(data.get("kind"))
        if rules is None:
            # OneOf has already reported the bad kind
            return
        errors = {
            field: [message]
            for field, check, message in rules
            if not check(data.get(field))
        }
        if errors:
            raise ValidationError(errors)

    @post_load
    def normalize(self, data, **kwargs):
        required = {field for field, _, _ in KIND_RULES[data["kind"]]}
        for field in VARIANT_FIELDS:
            if field not in required:
                data[field] = None
            elif field == "exercise":
                data[field] = data[field].strip()
        if data.get("date") is not None and data["date"].tzinfo is not None:
            data["date"] = data["date"].astimezone(timezone.utc).replace(tzinfo=None)
        return data


workout_schema = WorkoutSchema()
workouts_schema = WorkoutSchema(many=True)


def validate_record(payload):
    """Validate and normalize a submitted record.

    Returns ``(record, None)`` on success, where ``record`` is a dict with
    ``kind`` and every variant field set (unused ones to ``None``), plus
    ``id``/``date`` when the client sent them. Returns
    ``(None, ValidationFailure)`` naming the offending fields otherwise.
    """
    if not isinstance(payload, dict):
        return None, ValidationFailure("Request body is empty or invalid.")
    try:
        record = workout_schema.load(payload)
    except ValidationError as err:
        kind = payload.get("kind")
        kind = _alias_of(kind) or kind
        msg = KIND_SUMMARIES.get(kind, "Invalid kind value.") if isinstance(kind, str) else "Invalid kind value."
        return None, ValidationFailure(msg, errors=err.messages)
    return record, None
