"""Exception hierarchy for the promtail client."""


class PromtailError(Exception):
    """Base class for all client errors."""


class ConfigurationError(PromtailError):
    """Invalid configuration detected before the dispatcher starts."""


class EncodingError(PromtailError):
    """A batch could not be serialized to (or parsed from) the wire format."""


class ClientClosedError(PromtailError):
    """An entry was submitted after shutdown began."""


class DeliveryError(PromtailError):
    """A batch could not be delivered to the push endpoint.

    Carries the final HTTP status code and response body when the server
    answered, or ``None`` for both when the request never completed.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        msg = super().__str__()
        if self.status_code is not None:
            msg = f"{msg} (status={self.status_code}, body={self.body!r})"
        return msg
