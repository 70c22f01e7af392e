import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from workoutlogger.errors import Forbidden, NotFound
from workoutlogger.models.user import utcnow
from workoutlogger.models.workout import VARIANT_FIELDS, Workout

logger = logging.getLogger(__name__)


class WorkoutStore:
    """Ownership-scoped CRUD over the ``workouts`` table.

    Every method takes the caller's user id and only ever touches rows that
    user owns. Records handed to ``create``/``update`` must already have been
    through ``validate_record``. Mutating methods return ``(workout, error)``
    where ``error`` is a ``NotFound`` or ``Forbidden`` instance.
    """

    def __init__(self, session: Session):
        self.session = session

    def list(self, owner_id: int):
        query = (
            self.session.query(Workout)
            .filter(Workout.user_id == owner_id)
            .order_by(Workout.date, Workout.kind_rank(), Workout.id)
        )
        return query.all()

    def get(self, owner_id: int, workout_id: int):
        workout = self.session.get(Workout, workout_id)
        if workout is None:
            return None, NotFound("Record not found.")
        if workout.user_id != owner_id:
            logger.warning("User %s tried to access workout %s owned by %s",
                           owner_id, workout_id, workout.user_id)
            return None, Forbidden("You can only change your own records.")
        return workout, None

    def exists(self, workout_id: int) -> bool:
        return self.session.query(Workout.id).filter(Workout.id == workout_id).first() is not None

    def create(self, owner_id: int, record: dict):
        workout = Workout(user_id=owner_id, kind=record["kind"], date=utcnow())
        for field in VARIANT_FIELDS:
            setattr(workout, field, record.get(field))
        self.session.add(workout)
        self.session.commit()
        logger.info("User %s created %s workout %s", owner_id, workout.kind, workout.id)
        return workout, None

    def update(self, owner_id: int, workout_id: int, record: dict):
        workout, error = self.get(owner_id, workout_id)
        if error:
            return None, error

        try:
            self._apply(workout, record)
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            if not self.exists(workout_id):
                logger.info("Workout %s vanished during update", workout_id)
                return None, NotFound("Record not found.")
            logger.error("Concurrent modification of workout %s", workout_id)
            raise

        logger.info("User %s updated workout %s", owner_id, workout_id)
        return workout, None

    def delete(self, owner_id: int, workout_id: int):
        workout, error = self.get(owner_id, workout_id)
        if error:
            return None, error

        self.session.delete(workout)
        self.session.commit()
        logger.info("User %s deleted workout %s", owner_id, workout_id)
        return workout, None

    def _apply(self, workout, record):
        workout.kind = record["kind"]
        for field in VARIANT_FIELDS:
            setattr(workout, field, record.get(field))
        # The date only moves when the client sends one explicitly
        if record.get("date") is not None:
            workout.date = record["date"]
