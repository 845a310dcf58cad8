"""
wikiconnect: authentication and request dispatch for the MediaWiki Action API.
"""

import logging

from wikiconnect.errors import (  # noqa: F401
    WikiConnectError, ConfigurationError, EmptyResponse, UsageError,
    MalformedResponse
)
from wikiconnect.auth import (  # noqa: F401
    Auth, UserAndPassword, OAuthOwnerConsumer, OAuth1OwnerConsumer
)
from wikiconnect.client import ActionApi, DEFAULT_USER_AGENT, __version__  # noqa: F401
from wikiconnect.cookie import FileCookieJar  # noqa: F401
from wikiconnect.requester import Requester  # noqa: F401
from wikiconnect.token import Token  # noqa: F401

logging.getLogger(__name__).addHandler(logging.NullHandler())
