"""
Text fields accepted from clients.

JSON allows escapes such as '\\ud800' that decode to lone surrogates. Python
strings can hold them but they cannot be encoded as UTF-8, so neither BSON
nor the JSON response encoder can write them back out. 'Utf8Str' rejects such
values while the request body is decoded, before anything reaches the store.
"""

from typing import Annotated

from pydantic import AfterValidator


def ensure_utf8(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(f"text is not encodable as UTF-8 ({exc.reason} at position {exc.start})") from exc
    return value


Utf8Str = Annotated[str, AfterValidator(ensure_utf8)]
