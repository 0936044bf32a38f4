from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError

_http_url = TypeAdapter(HttpUrl)


def validate_product_url(url) -> str:
    """Return the stripped URL, or raise ValidationError for blank/malformed input.

    The caller's string is returned as given (minus surrounding whitespace),
    not pydantic's normalized form, so the stored source URL echoes the input.
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required", field="url")

    candidate = url.strip()
    try:
        _http_url.validate_python(candidate)
    except PydanticValidationError:
        raise ValidationError("Invalid URL format", field="url")
    return candidate
