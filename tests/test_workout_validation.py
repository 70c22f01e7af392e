from datetime import datetime, timedelta

import pytest

from workoutlogger.errors import ValidationFailure
from workoutlogger.models.workout import WorkoutKind
from workoutlogger.schemas.workout import validate_record, workout_schema


def strength(**overrides):
    record = {"kind": "StrengthWorkout", "exercise": "Squat", "sets": 3, "reps": 5, "weight": 225}
    record.update(overrides)
    return record


def cardio(**overrides):
    record = {"kind": "Cardio", "exercise": "Run", "miles": 3.1, "duration": "00:28:30"}
    record.update(overrides)
    return record


def test_strength_workout_keeps_lifting_fields_and_clears_cardio():
    record, error = validate_record(strength(miles=2, duration="00:10:00"))

    assert error is None
    assert record["kind"] == WorkoutKind.STRENGTH
    assert record["exercise"] == "Squat"
    assert (record["sets"], record["reps"], record["weight"]) == (3, 5, 225.0)
    assert record["miles"] is None
    assert record["duration"] is None


@pytest.mark.parametrize("field,value", [
    ("sets", 0),
    ("sets", -1),
    ("reps", 0),
    ("weight", -5),
    ("exercise", ""),
    ("exercise", "   "),
    ("sets", None),
])
def test_strength_workout_rejects_bad_required_field(field, value):
    record, error = validate_record(strength(**{field: value}))

    assert record is None
    assert isinstance(error, ValidationFailure)
    assert field in error.errors
    assert error.msg.startswith("StrengthWorkout requires")


def test_strength_workout_missing_weight_is_rejected():
    payload = strength()
    del payload["weight"]

    _, error = validate_record(payload)

    assert list(error.errors) == ["weight"]


def test_strength_workout_accepts_zero_weight():
    record, error = validate_record(strength(exercise="Pull-up", weight=0))

    assert error is None
    assert record["weight"] == 0


def test_cardio_keeps_distance_and_time_and_clears_lifting_fields():
    record, error = validate_record(cardio(sets=4, reps=10, weight=100))

    assert error is None
    assert record["miles"] == pytest.approx(3.1)
    assert record["duration"] == timedelta(minutes=28, seconds=30)
    assert record["sets"] is None
    assert record["reps"] is None
    assert record["weight"] is None


@pytest.mark.parametrize("field,value", [("miles", 0), ("miles", -1.5), ("duration", None), ("exercise", None)])
def test_cardio_rejects_bad_required_field(field, value):
    _, error = validate_record(cardio(**{field: value}))

    assert field in error.errors
    assert error.status_code == 400


def test_weigh_in_keeps_only_weight():
    payload = {"kind": "WeighIn", "weight": 180, "exercise": "Squat", "sets": 1,
               "reps": 1, "miles": 1, "duration": "00:01:00"}

    record, error = validate_record(payload)

    assert error is None
    assert record["weight"] == 180
    for field in ("exercise", "sets", "reps", "miles", "duration"):
        assert record[field] is None


@pytest.mark.parametrize("weight", [0, -1, None])
def test_weigh_in_requires_positive_weight(weight):
    _, error = validate_record({"kind": "WeighIn", "weight": weight})

    assert error.errors == {"weight": ["Weight must be greater than 0."]}
    assert error.msg == "WeighIn requires weight (>0)."


def test_unknown_kind_is_rejected():
    _, error = validate_record({"kind": "Yoga", "exercise": "Flow"})

    assert error.errors == {"kind": ["Invalid kind value."]}
    assert error.msg == "Invalid kind value."


def test_missing_kind_is_rejected():
    _, error = validate_record({"weight": 180})

    assert "kind" in error.errors


def test_legacy_workout_kind_is_read_as_strength():
    record, error = validate_record(strength(kind="Workout"))

    assert error is None
    assert record["kind"] == WorkoutKind.STRENGTH


def test_fractional_sets_are_rejected():
    _, error = validate_record(strength(sets=3.5))

    assert "sets" in error.errors


def test_non_object_body_is_rejected():
    record, error = validate_record(None)

    assert record is None
    assert error.msg == "Request body is empty or invalid."


def test_client_identity_fields_are_ignored():
    record, error = validate_record(strength(user_id=99, owner="mallory"))

    assert error is None
    assert "user_id" not in record
    assert "owner" not in record


@pytest.mark.parametrize("raw,expected", [
    ("00:30:00", timedelta(minutes=30)),
    ("1:05:09", timedelta(hours=1, minutes=5, seconds=9)),
    ("1.02:00:00", timedelta(days=1, hours=2)),
    (1800, timedelta(minutes=30)),
])
def test_duration_formats(raw, expected):
    record, error = validate_record(cardio(duration=raw))

    assert error is None
    assert record["duration"] == expected


@pytest.mark.parametrize("raw", ["30 minutes", "00:61:00", -10, True])
def test_invalid_duration_is_rejected(raw):
    _, error = validate_record(cardio(duration=raw))

    assert "duration" in error.errors


def test_aware_date_is_stored_as_naive_utc():
    record, error = validate_record(strength(date="2025-04-23T20:41:45+02:00"))

    assert error is None
    assert record["date"] == datetime(2025, 4, 23, 18, 41, 45)


def test_duration_dumps_as_clock_time():
    dumped = workout_schema.dump({"kind": "Cardio", "duration": timedelta(hours=26, minutes=3)})

    assert dumped["duration"] == "26:03:00"


@pytest.mark.parametrize("raw", [1e300, "99999999999:00:00", float("nan"), "366.00:00:00"])
def test_out_of_range_duration_is_rejected(raw):
    record, error = validate_record(cardio(duration=raw))

    assert record is None
    assert "duration" in error.errors


@pytest.mark.parametrize("field", ["sets", "reps"])
def test_counts_beyond_integer_column_are_rejected(field):
    _, error = validate_record(strength(**{field: 2**70}))

    assert field in error.errors
