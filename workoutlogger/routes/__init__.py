from .auth import auth_bp
from .guest_auth import guest_auth_bp
from .workouts import workouts_bp
from .health import health_bp
