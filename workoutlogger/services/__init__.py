from .auth_gateway import AuthGateway, generate_guest_password, validate_password
from .workout_store import WorkoutStore
