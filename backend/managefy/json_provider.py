# Overview: JSON provider that keeps money as Decimal on the way in.

import json
from decimal import Decimal

from flask.json.provider import DefaultJSONProvider


class ManagefyJSONProvider(DefaultJSONProvider):
    """
    Request bodies are parsed with parse_float=Decimal so prices and
    payments never pass through binary floats. Decimals in responses are
    written as JSON numbers.
    """

    sort_keys = False

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return float(o)
        return DefaultJSONProvider.default(o)

    def loads(self, s, **kwargs):
        kwargs.setdefault("parse_float", Decimal)
        return json.loads(s, **kwargs)
