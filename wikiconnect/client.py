import logging
from http.cookiejar import CookieJar
from typing import Any, Dict, Optional

import requests

import wikiconnect.errors as errors
from wikiconnect.auth import Auth
from wikiconnect.cookie import FileCookieJar
from wikiconnect.requester import Requester
from wikiconnect.token import Token
from wikiconnect.types import Parameters

__version__ = '1.0.0'

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'wikiconnect-mediawiki-client/1.0'


class ActionApi:
    """A client for the MediaWiki Action API at a given URL.

    Configuration is collected through the constructor arguments or the
    chainable ``set_*`` methods, then :py:meth:`build` creates the HTTP session
    and the :py:class:`~wikiconnect.requester.Requester`. :py:meth:`build` must
    be called exactly once, before any request is made.

    Examples:
        >>> api = ActionApi('https://en.wikipedia.org/w/api.php') \\
        ...     .set_user_agent('MyBot/1.0 (mybot@example.org)') \\
        ...     .set_file_cookie('cookies.lwp') \\
        ...     .build()
        >>> auth = UserAndPassword('MyBot@task', 'secret', api)
        >>> api.set_auth(auth)
        >>> if auth.login():
        ...     token = api.get_token('csrf')

    Args:
        api_url (str): Full URL of the ``api.php`` endpoint.
        user_agent (str): The User-Agent header. Defaults to
            ``DEFAULT_USER_AGENT``; Wikimedia sites require a descriptive one,
            see the `User-Agent policy
            <https://meta.wikimedia.org/wiki/User-Agent_policy>`_.
        global_params (Mapping[str, Any]): Parameters added to every request.
            Must not be empty.
        cookie_file (str): Path of a file to persist cookies in.
        cookiejar (http.cookiejar.CookieJar): A cookie jar to use. Takes
            precedence over `cookie_file`.
        connection_options (Dict[str, Any]): Additional arguments to be passed to
            the :py:meth:`requests.Session.request` method when performing API
            calls. If the `timeout` key is empty, a default timeout of 30
            seconds is added.
        custom_headers (Dict[str, str]): A dictionary of custom headers to be
            added to all API requests.
        pool (requests.Session): A preexisting :class:`~requests.Session` to be
            used when executing API requests. The user agent and custom headers
            are not applied to it.

    Raises:
        errors.ConfigurationError: `global_params` is empty.
    """

    def __init__(
        self,
        api_url: str,
        user_agent: Optional[str] = None,
        global_params: Optional[Parameters] = None,
        cookie_file: Optional[str] = None,
        cookiejar: Optional[CookieJar] = None,
        connection_options: Optional[Dict[str, Any]] = None,
        custom_headers: Optional[Dict[str, str]] = None,
        pool: Optional[requests.Session] = None
    ) -> None:
        self.api_url = api_url
        self.global_params: Optional[Dict[str, Any]] = None
        self._user_agent = user_agent
        self.cookies: Optional[CookieJar] = None
        self.connection_options = connection_options
        self.custom_headers = custom_headers
        self.pool = pool
        self.auth: Optional[Auth] = None
        self.requester: Optional[Requester] = None

        if global_params is not None:
            self.set_global_params(global_params)
        if cookiejar is not None:
            self.set_cookiejar(cookiejar)
        elif cookie_file is not None:
            self.set_file_cookie(cookie_file)
        log.info('ActionApi initialized with api_url: %s', api_url)

    def __repr__(self) -> str:
        return "<%s object '%s'>" % (self.__class__.__name__, self.api_url)

    @property
    def user_agent(self) -> str:
        return self._user_agent or DEFAULT_USER_AGENT

    def _check_not_built(self) -> None:
        if self.requester is not None:
            raise errors.ConfigurationError(
                'The connection is already built, configure it before calling build()'
            )

    def set_global_params(self, params: Optional[Parameters]) -> 'ActionApi':
        """Sets parameters to add to every request, e.g.
        ``{'formatversion': 2, 'assert': 'user'}``.

        Raises:
            errors.ConfigurationError: `params` is `None` or empty.
        """
        self._check_not_built()
        if not params:
            raise errors.ConfigurationError('Global parameters cannot be None or empty')
        self.global_params = dict(params)
        log.info('Global parameters set: %s', ', '.join(self.global_params))
        return self

    def set_user_agent(self, user_agent: str) -> 'ActionApi':
        self._check_not_built()
        self._user_agent = user_agent
        log.info('User agent set: %s', user_agent)
        return self

    def set_file_cookie(self, filename: str) -> 'ActionApi':
        """Persists cookies in `filename`, loading any cookies already stored
        there."""
        self._check_not_built()
        self.cookies = FileCookieJar(filename)
        log.info('File cookie set with file: %s', filename)
        return self

    def set_cookiejar(self, cookiejar: CookieJar) -> 'ActionApi':
        self._check_not_built()
        self.cookies = cookiejar
        return self

    def set_auth(self, auth: Optional[Auth]) -> 'ActionApi':
        """Binds `auth` to this api, replacing any previous one. May be called
        before or after :py:meth:`build`. Pass `None` to unbind.

        Raises:
            errors.ConfigurationError: `auth` is not an
                :py:class:`~wikiconnect.auth.Auth` created for this api.
        """
        if auth is not None:
            if not isinstance(auth, Auth):
                raise errors.ConfigurationError(
                    'Authentication is not an instance of Auth: %r' % (auth,)
                )
            if auth.api is not self:
                raise errors.ConfigurationError(
                    'Authentication was created for another ActionApi'
                )
        self.auth = auth
        if self.requester is not None:
            self.requester.set_auth(auth)
        log.info('Authentication set: %r', auth)
        return self

    def get_auth(self) -> Optional[Auth]:
        return self.auth

    def build(self) -> 'ActionApi':
        """Creates the HTTP session and the requester.

        Raises:
            errors.ConfigurationError: `build` was already called.
        """
        self._check_not_built()

        if self.pool is None:
            connection = requests.Session()
            connection.headers['User-Agent'] = self.user_agent
            if self.custom_headers:
                connection.headers.update(self.custom_headers)
        else:
            connection = self.pool

        if self.cookies is not None:
            connection.cookies = self.cookies  # type: ignore[assignment]
        else:
            self.cookies = connection.cookies

        self.requester = Requester(connection, self.api_url, self.global_params,
                                   self.connection_options)
        self.requester.set_auth(self.auth)
        log.info('ActionApi build completed with user agent: %s', self.user_agent)
        return self

    def get_requester(self) -> Requester:
        """
        Raises:
            errors.ConfigurationError: :py:meth:`build` was not called yet.
        """
        if self.requester is None:
            raise errors.ConfigurationError('build() must be called before making requests')
        return self.requester

    def get_token(self, type: str) -> Optional[str]:
        """Request a fresh MediaWiki token of the given `type`.

        Args:
            type (str): The type of token to request, e.g. ``login`` or ``csrf``.

        Returns:
            The token, or `None` if the server did not return one.
        """
        log.debug('Requesting token for type: %s', type)
        return Token(self.get_requester()).get(type)

    def get(self, action: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """Shorthand for ``api.get_requester().get(...)``."""
        return self.get_requester().get(action, *args, **kwargs)

    def post(self, action: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """Shorthand for ``api.get_requester().post(...)``."""
        return self.get_requester().post(action, *args, **kwargs)
