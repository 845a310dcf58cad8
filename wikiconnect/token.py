from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    import wikiconnect.requester


class Token:
    """Fetches MediaWiki tokens through a :py:class:`~wikiconnect.requester.Requester`.

    Tokens are not cached: every call to :py:meth:`get` is a new round trip,
    since the server may rotate them at any time.
    """

    def __init__(self, requester: 'wikiconnect.requester.Requester') -> None:
        self.requester = requester

    def get(self, type: str) -> Optional[str]:
        """Request a token of the given `type` (``login``, ``csrf``, ...).

        Returns:
            The token, or `None` if the response does not contain one.

        Raises:
            errors.UsageError: The API returned an error.
        """
        info = self.requester.get('query', meta='tokens', type=type)
        return info['query']['tokens'].get('%stoken' % type)
