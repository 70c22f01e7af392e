from .user import User
from .workout import Workout, WorkoutKind
