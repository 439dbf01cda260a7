"""
Domain errors.

CRUD functions raise these; ``main.py`` renders them as JSON responses with
the status code carried by the class.
"""


class FindOneError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(FindOneError):
    status_code = 404
    code = "not_found"


class Forbidden(FindOneError):
    status_code = 403
    code = "forbidden"


class Conflict(FindOneError):
    status_code = 409
    code = "conflict"


class JoinRejected(Conflict):
    code = "join_rejected"


class CapacityExceeded(Conflict):
    code = "capacity_exceeded"


class InvalidTransition(Conflict):
    code = "invalid_transition"


class AlreadyRated(Conflict):
    code = "already_rated"
