class ServiceException(Exception):
    """Base for errors a route handler turns into an HTTP failure response."""

    status_code = 400


class NotFound(ServiceException):
    status_code = 404


class Conflict(ServiceException):
    status_code = 409


class EmptyCart(ServiceException):
    status_code = 400


class InvalidRequest(ServiceException):
    status_code = 400


class InvalidCredentials(ServiceException):
    status_code = 401


class InternalFailure(ServiceException):
    status_code = 500
