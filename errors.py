# errors.py

from typing import Optional

from fastapi import HTTPException, status


class WebhookRejected(HTTPException):
    """
    Base class for every reason a webhook request is turned away.

    Each subclass fixes its HTTP status and a short diagnostic message, so
    handlers only need to raise the matching kind.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "request rejected"
    headers = None

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or type(self).detail,
            headers=type(self).headers,
        )


class MethodNotAllowed(WebhookRejected):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    detail = "unsupported method"
    headers = {"Allow": "POST"}


class UnsupportedEvent(WebhookRejected):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "unsupported event type"


class UnsupportedMediaType(WebhookRejected):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    detail = "unsupported content type"


class MalformedSignature(WebhookRejected):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "malformed signature"


class MalformedPayload(WebhookRejected):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "malformed json"


class SignatureMismatch(WebhookRejected):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    detail = "signature mismatch"


class RepositoryMismatch(WebhookRejected):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    detail = "repository mismatch"


class Spillover(WebhookRejected):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "spillover"


class CommandError(Exception):
    """A resolved command could not be run to a successful exit."""

    def __init__(self, argv, message: str):
        super().__init__(message)
        self.argv = list(argv)


class CommandFailed(CommandError):
    pass


class CommandTimeout(CommandError):
    pass


class ConfigError(Exception):
    pass
