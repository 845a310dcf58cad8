import json
import unittest
import unittest.mock as mock

import pytest

from wikiconnect.errors import MalformedResponse, UsageError
from wikiconnect.requester import Requester
from wikiconnect.token import Token

if __name__ == "__main__":
    print()
    print("Note: Running in stand-alone mode. Consult the README")
    print("      (section 'Contributing') for advice on running tests.")
    print()


class TestToken(unittest.TestCase):

    def setUp(self):
        self.requester = mock.create_autospec(Requester, instance=True)
        self.token = Token(self.requester)

    def test_get_returns_token(self):
        # A backslash in the JSON string decodes to a single backslash
        self.requester.get.return_value = json.loads(
            r'{ "query": { "tokens": { "logintoken": "abc123+\\" } } }'
        )

        assert self.token.get('login') == 'abc123+\\'
        self.requester.get.assert_called_once_with('query', meta='tokens', type='login')

    def test_get_returns_none_if_token_missing(self):
        self.requester.get.return_value = {'query': {'tokens': {}}}

        assert self.token.get('csrf') is None

    def test_get_is_not_cached(self):
        self.requester.get.side_effect = [
            {'query': {'tokens': {'csrftoken': 'first+\\'}}},
            {'query': {'tokens': {'csrftoken': 'second+\\'}}},
        ]

        assert self.token.get('csrf') == 'first+\\'
        assert self.token.get('csrf') == 'second+\\'
        assert self.requester.get.call_count == 2

    def test_get_propagates_api_errors(self):
        self.requester.get.side_effect = UsageError('unknown_type', 'Unrecognized value')

        with pytest.raises(UsageError):
            self.token.get('foo')

    def test_get_propagates_malformed_response(self):
        self.requester.get.side_effect = MalformedResponse('{ not a valid json }')

        with pytest.raises(MalformedResponse):
            self.token.get('login')


if __name__ == '__main__':
    unittest.main()
