# workoutlogger/utils/decorators.py
from functools import wraps
from flask_jwt_extended import get_current_user, jwt_required


def inject_current_user(view_func):
    """
    Require a valid bearer token and pass the User it names to the view
    as the ``current_user`` keyword argument.
    """
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        # The user lookup loader has already rejected tokens for unknown users
        kwargs['current_user'] = get_current_user()
        return view_func(*args, **kwargs)
    return wrapper
