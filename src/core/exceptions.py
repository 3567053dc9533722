"""Custom exceptions. Engine operations report rejections as values; these are for the edges."""


class GameError(Exception):
    """Base class for errors raised by the chess domain."""


class InvalidSquareError(GameError):
    """Square name cannot be parsed or lies outside the board."""


class InvalidRequestError(GameError):
    """Incoming request data failed validation. Raised from pydantic validators and propagates as is."""


# --- EXTERNAL COMPLETION SERVICE ---
class CompletionServiceError(Exception):
    """Base class for anything that goes wrong talking to the text-completion service."""


class TransportError(CompletionServiceError):
    """Network error, timeout, non-success HTTP status or missing credentials."""


class MalformedResponseError(CompletionServiceError):
    """The service answered, but not with a usable `choices[0].message.content`."""
