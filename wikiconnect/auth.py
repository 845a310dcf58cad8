import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

from requests.auth import AuthBase
from requests_oauthlib import OAuth1

import wikiconnect.errors as errors
from wikiconnect.types import Headers

if TYPE_CHECKING:
    import wikiconnect.client
    import wikiconnect.requester

log = logging.getLogger(__name__)


class Auth(ABC):
    """Base class for the ways of authenticating against a MediaWiki API.

    An :py:class:`Auth` is created for an :py:class:`~wikiconnect.client.ActionApi`
    and then bound to it explicitly::

        >>> auth = UserAndPassword('MyBot@task', 'secret', api)
        >>> api.set_auth(auth)
        >>> auth.login()
        True

    Once bound, :py:meth:`auth_headers` and :py:meth:`connection_auth` are
    consulted for every request made by the api's requester. Neither may make
    requests itself, otherwise each request would recurse into them again.

    The server-confirmed username is cached. The cache is filled by every
    userinfo query and by a successful login, and cleared by
    :py:meth:`logout`. Nothing guards it against concurrent updates.

    Args:
        api (wikiconnect.client.ActionApi): The api this object authenticates.
    """

    def __init__(self, api: 'wikiconnect.client.ActionApi') -> None:
        self.api = api
        self._real_username: Optional[str] = None

    @property
    def requester(self) -> 'wikiconnect.requester.Requester':
        return self.api.get_requester()

    def bind(self) -> 'Auth':
        """Shorthand for ``api.set_auth(self)``."""
        self.api.set_auth(self)
        return self

    @abstractmethod
    def login(self) -> bool:
        """Logs in. Returns whether the session is authenticated afterwards."""

    @abstractmethod
    def logout(self) -> None:
        """Ends the authenticated session."""

    @abstractmethod
    def is_logged_in(self) -> bool:
        """Asks the server whether the current session is authenticated."""

    @abstractmethod
    def username(self) -> Optional[str]:
        """The username this object was configured with."""

    def real_username(self) -> str:
        """The username as reported by the server.

        Served from the cache when possible, otherwise fetched with a userinfo
        query. This may differ from :py:meth:`username`, e.g. for bot passwords
        (``MyBot@task`` logs in as ``MyBot``).
        """
        if self._real_username is None:
            self.query_userinfo()
        return self._real_username  # type: ignore[return-value]

    def auth_headers(self) -> Headers:
        """Headers to add to every request."""
        return {}

    def connection_auth(self) -> Optional[AuthBase]:
        """A :py:mod:`requests` authentication handler to use for every request,
        or `None`."""
        return None

    def query_userinfo(self, **kwargs: Any) -> Dict[str, Any]:
        """Fetches ``meta=userinfo`` and refreshes the cached username.

        Returns:
            The `userinfo` object of the response.
        """
        info = self.requester.get('query', meta='userinfo', **kwargs)
        userinfo = info['query']['userinfo']
        self._real_username = userinfo['name']
        return userinfo


class UserAndPassword(Auth):
    """Session login with a username and a (bot) password.

    The session is carried by cookies, so no headers are added to requests.
    See https://www.mediawiki.org/wiki/API:Login

    Args:
        username (str): MediaWiki username, for bot passwords in the form
            ``Username@BotPasswordName``.
        password (str): MediaWiki password or bot password.
        api (wikiconnect.client.ActionApi): The api this object authenticates.
    """

    def __init__(
        self, username: str, password: str, api: 'wikiconnect.client.ActionApi'
    ) -> None:
        super().__init__(api)
        self._username = username
        self.password = password
        log.info('Auth object created for user: %s', username)

    def __repr__(self) -> str:
        return '<%s for %r>' % (self.__class__.__name__, self._username)

    def login(self) -> bool:
        """Logs in using ``action=login``.

        Does nothing but return `True` if the session is already logged in.

        Returns:
            `True` if the server accepted the credentials, `False` otherwise.

        Raises:
            errors.UsageError: The API returned an error other than a failed
                login.
        """
        log.info('Attempting to log in user: %s', self._username)
        if self.is_logged_in():
            log.info('This user is already logged in.')
            return True

        token = self.api.get_token('login')
        try:
            login = self.requester.post('login', lgname=self._username,
                                        lgpassword=self.password, lgtoken=token)
        except errors.UsageError as e:
            if e.code != 'login_failed':
                raise
            log.warning('Login failed for user %s: %s', self._username, e.info)
            return False

        result = login['login']
        if result.get('result') == 'Success':
            self._real_username = result['lgusername']
            log.info('Login successful for user: %s', self._real_username)
            return True

        log.warning('Login failed for user %s: %s', self._username,
                    result.get('reason', result.get('result')))
        return False

    def logout(self) -> None:
        """Logs out using ``action=logout``. Only warns if not logged in."""
        if not self.is_logged_in():
            log.warning('User is not logged in. Cannot perform logout.')
            return

        username = self._real_username
        log.info('Attempting to log out user: %s', username)
        token = self.api.get_token('csrf')
        self.requester.post('logout', token=token)
        self._real_username = None
        log.info('User logged out successfully: %s', username)

    def is_logged_in(self) -> bool:
        """Checks the session with a userinfo query.

        The anonymous user has id 0. The cached username is refreshed whatever
        the outcome.

        Raises:
            errors.EmptyResponse: The server sent no response body.
        """
        userinfo = self.query_userinfo()
        if userinfo.get('id', 0) > 0:
            log.debug('User is logged in: %s', self._real_username)
            return True
        log.debug('User is not logged in')
        return False

    def username(self) -> str:
        return self._username


class OwnerOnlyConsumer(Auth):
    """Base for OAuth owner-only consumers, whose credentials are issued
    beforehand and never expire from the client's point of view.

    There is no login handshake: :py:meth:`login` only checks that the
    credentials are accepted. The identity is cached until :py:meth:`login`
    or :py:meth:`logout` is called.
    """

    def login(self) -> bool:
        self._real_username = None
        return self.is_logged_in()

    def logout(self) -> None:
        # Nothing to invalidate on the server
        self._real_username = None

    def is_logged_in(self) -> bool:
        """Returns whether the server accepts the credentials.

        Any failure to resolve the identity, including network errors, is
        logged and reported as `False`.
        """
        try:
            self.real_username()
        except Exception as e:
            log.warning('OAuth login check failed: %s', e)
            return False
        return True

    def username(self) -> Optional[str]:
        """There is no configured username, so this is the server-confirmed
        one, or `None` if it cannot be resolved."""
        try:
            return self.real_username()
        except Exception as e:
            log.warning('Could not resolve OAuth username: %s', e)
            return None

    def query_userinfo(self, **kwargs: Any) -> Dict[str, Any]:
        kwargs.setdefault('dir', 'user')
        return super().query_userinfo(**kwargs)


class OAuthOwnerConsumer(OwnerOnlyConsumer):
    """OAuth 2 owner-only consumer, authenticated with a bearer token.

    See https://www.mediawiki.org/wiki/OAuth/Owner-only_consumers

    Args:
        access_token (str): The access token issued for the consumer.
        api (wikiconnect.client.ActionApi): The api this object authenticates.
    """

    def __init__(self, access_token: str, api: 'wikiconnect.client.ActionApi') -> None:
        super().__init__(api)
        self.access_token = access_token
        log.info('OAuthOwnerConsumer initialized with access token')

    def auth_headers(self) -> Headers:
        return {'Authorization': 'Bearer %s' % self.access_token}


class OAuth1OwnerConsumer(OwnerOnlyConsumer):
    """OAuth 1.0a owner-only consumer. Every request is signed with
    :py:class:`requests_oauthlib.OAuth1`.

    Args:
        consumer_token (str): OAuth1 consumer key.
        consumer_secret (str): OAuth1 consumer secret.
        access_token (str): OAuth1 access key.
        access_secret (str): OAuth1 access secret.
        api (wikiconnect.client.ActionApi): The api this object authenticates.
    """

    def __init__(
        self,
        consumer_token: str,
        consumer_secret: str,
        access_token: str,
        access_secret: str,
        api: 'wikiconnect.client.ActionApi'
    ) -> None:
        super().__init__(api)
        self.oauth = OAuth1(consumer_token, consumer_secret, access_token, access_secret)
        log.info('OAuth1OwnerConsumer initialized with consumer token')

    def connection_auth(self) -> OAuth1:
        return self.oauth
