# Overview: Typed errors raised by the service layer and mapped to HTTP by the facade.

"""
Every core operation raises one of these. The facade (error handlers in
managefy/__init__.py) is the single place that turns them into response
envelopes, so services never build HTTP responses themselves.
"""


class ManagefyError(Exception):
    """Base class for errors that are safe to show to the client."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(ManagefyError):
    """Malformed input, failed precondition, missing entity or invalid transition."""
    status_code = 400


class UnauthorizedError(ManagefyError):
    """Bad token, credential mismatch or role predicate denial."""
    status_code = 401


class NotFoundError(ManagefyError):
    """No handler for the requested route."""
    status_code = 404


class InternalError(ManagefyError):
    """Collaborator failure; the cause is logged, never returned."""
    status_code = 500
