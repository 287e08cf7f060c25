# errors.py


class PlannerError(Exception):
    """Base class for errors reported back to the student."""
    status_code = 400


class InvalidAmount(PlannerError):
    pass


class InvalidCategory(PlannerError):
    pass


class InvalidStatus(PlannerError):
    pass


class InvalidWeekday(PlannerError):
    pass


class MissingField(PlannerError):
    pass


class Unauthenticated(PlannerError):
    status_code = 401


class NotFound(PlannerError):
    status_code = 404


class CollaboratorUnavailable(PlannerError):
    """The database (or any other backing service) refused the request."""
    status_code = 503


class DataFileError(PlannerError):
    """The planner's local data file is unreadable."""
