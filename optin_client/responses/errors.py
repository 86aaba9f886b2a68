from __future__ import annotations


class ResponseError(Exception):
    """Base class for everything the response envelope raises."""


class DecodeError(ResponseError):
    """Body was served as application/json but is not valid JSON."""


class NoResultError(ResponseError):
    def __init__(self, message: str = "No result from server."):
        super().__init__(message)


# data()/meta() and error_message() report the same condition
NoDecodedBodyError = NoResultError


class MissingFieldError(ResponseError):
    def __init__(self, field: str):
        super().__init__(f"Missing field in server response: {field}")
        self.field = field
