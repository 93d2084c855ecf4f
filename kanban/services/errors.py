"""Typed service failures.

Every service either returns a result or raises exactly one ServiceError
carrying a message, an HTTP-style status and a machine-readable code.
The subclasses name the failure families; the HTTP layer only needs the
base class.
"""


class ServiceError(Exception):
    status = 500

    def __init__(self, message, status=None, code=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.code = code

    def to_dict(self):
        body = {"error": self.message, "success": False}
        if self.code:
            body["code"] = self.code
        return body

    def __repr__(self):
        return f"<{type(self).__name__} {self.status} {self.code}>"


class NotFound(ServiceError):
    status = 404


class Forbidden(ServiceError):
    status = 403


class InvalidInput(ServiceError):
    status = 400


class Conflict(ServiceError):
    status = 409


class OperationDisabled(ServiceError):
    status = 405


class InternalError(ServiceError):
    status = 500
