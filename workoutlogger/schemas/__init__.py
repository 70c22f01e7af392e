from .workout import WorkoutSchema, workout_schema, workouts_schema, validate_record
from .auth import CredentialsSchema, GuestLoginSchema, TokenSchema
