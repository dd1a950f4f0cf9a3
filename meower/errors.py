from typing import Any


class MeowerError(Exception):
    def __init__(self, message: str = "", body: Any = None):
        super().__init__(message)
        self.body = body


class ApiError(MeowerError): pass

class ShapeError(MeowerError, ValueError): pass

class SocketConnectionError(MeowerError, ConnectionError): pass

class StatusCodeError(MeowerError):
    def __init__(self, statuscode: str, body: Any = None):
        super().__init__(f"request failed with status {statuscode}", body)
        self.statuscode = statuscode

class NotSupported(MeowerError): pass
