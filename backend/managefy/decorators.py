# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, g

from .errors import UnauthorizedError
from .services import auth_service


def require_auth(f):
    """
    Require a valid bearer token and materialise the caller.

    Sets g.current_user to the authenticated User.

    SECURITY: Raises UnauthorizedError (401 envelope) if:
    - No Authorization header or not a Bearer scheme
    - Bad signature, malformed or expired token
    - The token's user no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            raise UnauthorizedError("Authentication required")

        token = auth_header.split(" ", 1)[1].strip()
        if not token:
            raise UnauthorizedError("Authentication required")

        g.current_user = auth_service.get_user_for_token(token)

        return f(*args, **kwargs)

    return decorated_function
