"""Request parsing and response building."""
from .request import (  # noqa: F401
    BadRequestError,
    Method,
    ParsedRequest,
    head_end,
    parse_request,
)
from .response import Response, error_response, too_many_requests  # noqa: F401
