"""HTTP client layer for clink.

- :class:`AuthenticatedClient` -- the authenticated request pipeline.
- :class:`DrinkAPI` -- typed operations built on it.
- :func:`decode_response` -- status-based decoding into models or errors.

Example::

    from clink.client import DrinkAPI

    api = DrinkAPI(config)
    balance = api.drop("bigdrink", 3)
"""

from clink.client.api import DrinkAPI
from clink.client.response import decode_response, extract_error_message
from clink.client.sync_client import AuthenticatedClient

__all__ = ["AuthenticatedClient", "DrinkAPI", "decode_response", "extract_error_message"]
