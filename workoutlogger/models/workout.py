from sqlalchemy import case
from workoutlogger.extensions import db
from .user import utcnow


class WorkoutKind:
    """Tags for the three record variants stored in the ``workouts`` table."""

    STRENGTH = "StrengthWorkout"
    CARDIO = "Cardio"
    WEIGH_IN = "WeighIn"

    ALL = (STRENGTH, CARDIO, WEIGH_IN)

    # Display order within a single day: weigh-ins first, lifting last
    SORT_RANK = {WEIGH_IN: 0, CARDIO: 1, STRENGTH: 2}


# Columns a record's kind decides over; everything else is server managed
VARIANT_FIELDS = ("exercise", "sets", "reps", "weight", "miles", "duration")


class Workout(db.Model):
    __tablename__ = "workouts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    kind = db.Column(
        db.String(20),
        db.CheckConstraint("kind IN ('StrengthWorkout','Cardio','WeighIn')"),
        nullable=False,
    )

    # Variant fields, nullable at the storage layer
    exercise = db.Column(db.String(150))
    sets = db.Column(db.Integer)
    reps = db.Column(db.Integer)
    weight = db.Column(db.Float)
    miles = db.Column(db.Float)
    duration = db.Column(db.Interval)

    user = db.relationship("User", back_populates="workouts")

    __table_args__ = (
        db.Index("idx_workouts_user_date", "user_id", "date"),
    )

    @classmethod
    def kind_rank(cls):
        return case(WorkoutKind.SORT_RANK, value=cls.kind, else_=len(WorkoutKind.ALL))

    def __repr__(self):
        return f"<Workout {self.id} {self.kind}>"
