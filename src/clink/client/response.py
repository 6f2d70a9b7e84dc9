"""Response decoding -- maps :class:`httpx.Response` to typed values or errors.

Two rules cover every response the drink service and identity provider
send:

- **200** -- the body must validate against the operation's Pydantic
  model; anything else is a :class:`~clink.exceptions.BadFormatError`.
- **any other status** -- the body is read as text and the most specific
  message available is extracted (``{"error": ...}``, then
  ``{"message": ...}``, then the raw text) into a
  :class:`~clink.exceptions.ServerError`.
"""

from __future__ import annotations

from typing import Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from clink.exceptions import BadFormatError, ServerError
from clink.models import ErrorBody, MessageBody

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_error_message(text: str) -> str:
    """Pick the error text out of a non-200 response body.

    Example::

        >>> extract_error_message('{"error": "ticket expired"}')
        'ticket expired'
        >>> extract_error_message("not json")
        'not json'
    """
    try:
        return ErrorBody.model_validate_json(text).error
    except ValidationError:
        pass
    try:
        return MessageBody.model_validate_json(text).message
    except ValidationError:
        return text


def decode_response(response: httpx.Response, model: type[ModelT]) -> ModelT:
    """Decode *response* into *model* or raise the matching error.

    Raises:
        BadFormatError: On a 200 whose body does not match *model*.
        ServerError: On any other status.
    """
    if response.status_code == httpx.codes.OK:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise BadFormatError(
                f"BadFormat (The server sent data we didn't understand): "
                f"{exc.error_count()} error(s) decoding {model.__name__}"
            ) from exc

    try:
        uri: Optional[str] = str(response.request.url)
    except RuntimeError:
        # Responses built by hand carry no request.
        uri = None
    raise ServerError(uri, extract_error_message(response.text))
