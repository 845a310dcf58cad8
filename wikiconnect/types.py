from typing import Any, Mapping

Parameters = Mapping[str, Any]

Headers = Mapping[str, str]
