import json
import logging
from collections import OrderedDict
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

import requests

import wikiconnect.errors as errors
from wikiconnect.types import Parameters

if TYPE_CHECKING:
    import wikiconnect.auth

log = logging.getLogger(__name__)


class Requester:
    """Sends calls to a single MediaWiki ``api.php`` endpoint.

    Every call made by this library goes through a :py:class:`Requester`: it
    merges the global parameters with the per-call ones, attaches whatever the
    bound :py:class:`~wikiconnect.auth.Auth` contributes, performs exactly one
    HTTP exchange and turns the MediaWiki error envelopes into exceptions.
    Cookies set by the server end up in the session's cookie jar as a side
    effect.

    A requester holds one session and is meant to be used by one caller at a
    time. Callers sharing it between threads must serialize access themselves.

    Args:
        connection (requests.Session): The session used to perform requests.
        api_url (str): Full URL of the ``api.php`` endpoint.
        global_params (Mapping[str, Any]): Parameters sent with every request.
        connection_options (Dict[str, Any]): Additional arguments to be passed to
            :py:meth:`requests.Session.request`. If the `timeout` key is empty, a
            default timeout of 30 seconds is added.
    """

    def __init__(
        self,
        connection: requests.Session,
        api_url: str,
        global_params: Optional[Parameters] = None,
        connection_options: Optional[Dict[str, Any]] = None
    ) -> None:
        self.connection = connection
        self.api_url = api_url
        self.global_params = dict(global_params) if global_params else None
        self.requests = dict(connection_options or {})
        if 'timeout' not in self.requests:
            self.requests['timeout'] = 30  # seconds
        self.auth: Optional['wikiconnect.auth.Auth'] = None

    def __repr__(self) -> str:
        return "<%s object '%s'>" % (self.__class__.__name__, self.api_url)

    def set_auth(self, auth: Optional['wikiconnect.auth.Auth']) -> None:
        """Binds `auth` to this requester, replacing any previous binding.
        Pass `None` to send anonymous requests again."""
        self.auth = auth

    def get(self, action: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """Perform a generic API call using GET.

        This is just a shorthand for calling api() with http_method='GET'.
        All arguments will be passed on.

        Args:
            action (str): The MediaWiki API action to be performed.

        Returns:
            The decoded response from the API call, as a dictionary.
        """
        return self.api(action, 'GET', *args, **kwargs)

    def post(self, action: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """Perform a generic API call using POST.

        This is just a shorthand for calling api() with http_method='POST'.
        All arguments will be passed on.

        Args:
            action (str): The MediaWiki API action to be performed.

        Returns:
            The decoded response from the API call, as a dictionary.
        """
        return self.api(action, 'POST', *args, **kwargs)

    def api(
        self, action: str, http_method: str = 'POST', *args: Any, **kwargs: Any
    ) -> Dict[str, Any]:
        """Perform a generic API call and handle errors.

        Example:
            >>> requester.api('query', 'GET', meta='siteinfo')

        Args:
            action (str): The MediaWiki API action to be performed.
            http_method (str): The HTTP method to use, `GET` or `POST`.
            *args (Tuple[str, Any]): Parameters as key-value pairs.
            **kwargs (Any): Parameters as keyword arguments.

        Returns:
            The decoded response from the API call, as a dictionary.
        """
        kwargs.update(args)
        return self.send(http_method, action, kwargs)

    def send(
        self,
        http_method: str,
        action: str,
        params: Optional[Parameters] = None
    ) -> Dict[str, Any]:
        """Send one request to the API and validate the response.

        Use this instead of :py:meth:`api` when parameter names clash with
        Python keywords or with the `action` and `http_method` arguments.

        Args:
            http_method (str): `GET` or `POST`.
            action (str): The MediaWiki API action to be performed. It always
                overrides an `action` key in `params`.
            params (Mapping[str, Any]): The per-call parameters. They override
                global parameters with the same name. A per-call `False` or
                `None` omits the parameter, which also removes a global
                parameter with the same name.

        Returns:
            The decoded response from the API call, as a dictionary.

        Raises:
            ValueError: `http_method` is neither `GET` nor `POST`.
            errors.EmptyResponse: The server sent no response body.
            errors.MalformedResponse: The response body is not a JSON object.
            errors.UsageError: The API returned an error, or the action reported
                ``"result": "Failed"``.
            requests.exceptions.HTTPError: Received a status code in the 4xx or
                5xx range.
            requests.exceptions.ConnectionError: Encountered an unexpected error
                while performing the API request.
            requests.exceptions.Timeout: The API request timed out.
        """
        http_method = http_method.upper()
        if http_method not in {'GET', 'POST'}:
            raise ValueError('Unsupported HTTP method: %s' % http_method)

        data = self.merge_params(action, params)
        res = self.raw_call(data, http_method=http_method)
        info = self.decode(res)
        self.handle_api_result(info, action, res)
        return info

    def merge_params(
        self, action: str, params: Optional[Parameters] = None
    ) -> 'OrderedDict[str, str]':
        """Builds the parameters of a request.

        Later sources win: the global parameters, then `params`, then
        ``format=json`` and `action`. The response is always decoded as JSON,
        so `format` cannot be overridden.
        """
        data: Dict[str, Any] = {}
        if self.global_params:
            data.update(self.global_params)
        if params:
            data.update(params)
        data['format'] = 'json'
        data['action'] = action
        return self._query_string(data)

    @staticmethod
    def _query_string(data: Mapping[str, Any]) -> 'OrderedDict[str, str]':
        # Tokens go last so that a truncated body is rejected by the server.
        qs1 = [
            (k, v) for k, v in data.items() if k not in {'token', 'lgtoken'}
        ]
        qs2 = [
            (k, v) for k, v in data.items() if k in {'token', 'lgtoken'}
        ]
        query: 'OrderedDict[str, str]' = OrderedDict()
        for key, value in qs1 + qs2:
            value = Requester._format_value(value)
            if value is not None:
                query[key] = value
        return query

    @staticmethod
    def _format_value(value: Any) -> Optional[str]:
        # MediaWiki treats the presence of a parameter as true
        if value is None or value is False:
            return None
        if value is True:
            return '1'
        if isinstance(value, (list, tuple, set)):
            return '|'.join(str(item) for item in value)
        return str(value)

    def raw_call(self, data: Mapping[str, str], http_method: str = 'POST') -> str:
        """Perform a single HTTP request and return the raw text.

        Headers from the bound :py:class:`~wikiconnect.auth.Auth` are computed
        for every call. Parameters go to the query string for `GET` and to a
        form-encoded body for `POST`, both UTF-8 encoded.

        Args:
            data (Mapping[str, str]): Request parameters, already merged.
            http_method (str): The HTTP method, defaults to 'POST'

        Returns:
            The raw text response.

        Raises:
            errors.EmptyResponse: The response has no body.
            requests.exceptions.HTTPError: Received a status code in the 4xx or
                5xx range.
        """
        headers: Dict[str, str] = {}
        args: Dict[str, Any] = {}
        if self.auth is not None:
            headers.update(self.auth.auth_headers())
            connection_auth = self.auth.connection_auth()
            if connection_auth is not None:
                args['auth'] = connection_auth
        args['headers'] = headers
        for k, v in self.requests.items():
            args[k] = v
        if http_method == 'GET':
            args['params'] = data
        else:
            args['data'] = data

        log.debug('%s %s (action=%s)', http_method, self.api_url, data.get('action'))
        stream = self.connection.request(http_method, self.api_url, **args)
        stream.raise_for_status()

        if not stream.content:
            raise errors.EmptyResponse()
        stream.encoding = 'utf-8'
        text = stream.text
        if not text.strip():
            raise errors.EmptyResponse()
        return text

    @staticmethod
    def decode(res: str) -> Dict[str, Any]:
        """Decodes a response body into a dictionary.

        Raises:
            errors.MalformedResponse: The body is not a JSON object.
        """
        try:
            info = json.loads(res, object_pairs_hook=OrderedDict)
        except ValueError as err:
            raise errors.MalformedResponse(res) from err
        if not isinstance(info, dict):
            raise errors.MalformedResponse(res)
        return info

    @staticmethod
    def handle_api_result(
        info: Mapping[str, Any], action: str, response_text: Optional[str] = None
    ) -> None:
        """Checks the given API response, raising an appropriate exception.

        Args:
            info (dict): The API result.
            action (str): The action the request was made for. Only a failure
                reported under this key is raised.
            response_text (str): The raw response, attached to the exception.

        Raises:
            errors.UsageError: The response contains an error.
        """
        warnings = info.get('warnings')
        if isinstance(warnings, dict):
            for module, warning in warnings.items():
                if not isinstance(warning, dict):
                    log.warning('%s: %s', module, warning)
                elif '*' in warning:
                    log.warning('%s: %s', module, warning['*'])
                elif 'warnings' in warning:
                    log.warning('%s: %s', module, warning['warnings'])
        elif isinstance(warnings, list):
            # errorformat other than bc: a list of {code, text, module}
            for warning in warnings:
                if isinstance(warning, dict):
                    log.warning('%s: %s', warning.get('module', 'main'),
                                warning.get('text') or warning.get('code'))

        if 'error' in info:
            error = info['error']
            if not isinstance(error, dict):
                error = {}
            raise errors.UsageError(
                error.get('code') or 'unknown',
                error.get('info') or 'No error information provided',
                response_text
            )

        result = info.get(action)
        if isinstance(result, dict) and result.get('result') == 'Failed':
            raise errors.UsageError('%s_failed' % action, result.get('reason', ''),
                                    response_text)
