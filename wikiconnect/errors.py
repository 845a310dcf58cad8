from typing import Optional, cast


class WikiConnectError(RuntimeError):
    """Base class for all wikiconnect errors."""
    pass


class ConfigurationError(WikiConnectError, ValueError):
    """The client was configured with an invalid value, or used before
    :py:meth:`wikiconnect.client.ActionApi.build` was called."""
    pass


class EmptyResponse(WikiConnectError):
    """The server answered without a response body."""

    def __init__(self, message: str = 'Failed to get server response') -> None:
        super().__init__(message)

    def __str__(self) -> str:
        return cast(str, self.args[0])


class UsageError(WikiConnectError):
    """The MediaWiki API rejected the request.

    Raised both for the generic error envelope (``{"error": {...}}``) and for
    per-action failures (``{"<action>": {"result": "Failed"}}``), in which
    case `code` is ``<action>_failed``.

    Attributes:
        code (str): The error code returned by the API.
        info (str): The error message returned by the API.
        response_text (Optional[str]): The raw response body.
    """

    def __init__(
        self, code: str, info: str, response_text: Optional[str] = None
    ) -> None:
        super().__init__(code, info, response_text)
        self.code = code
        self.info = info
        self.response_text = response_text

    @property
    def message(self) -> str:
        return self.info

    def __str__(self) -> str:
        return f'{self.info} [Code: {self.code}]'


class MalformedResponse(WikiConnectError, ValueError):
    """Raised when the server returns something that is not a JSON object.

    The underlying decoding error, if any, is available as ``__cause__``.

    Attributes:
        response_text (str): The response text from the server.
    """

    def __init__(self, response_text: Optional[str] = None) -> None:
        super().__init__((
            'Did not get a valid JSON response from the server. Check that '
            'you used the correct API URL. If you did, the server might '
            'be wrongly configured or experiencing temporary problems.'),
            response_text
        )
        self.response_text = response_text

    def __str__(self) -> str:
        return cast(str, self.args[0])
