"""
Mapping from the error taxonomy to HTTP responses.

The mapping is total and has two outcomes: validation, not-found and
duplicate errors ('ReferenceCheckError') are the client's fault and map to
400; everything else, including decode, store, timeout and consistency
failures, maps to 500. A status is resolved by walking the error's class
hierarchy until a registered class is found, with 'MessengerError' as the
fallback.

Bodies always have the shape '{"message": <string>}', also for exceptions
outside the taxonomy, which 'unhandled_error_handler' reports as 500.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from messenger.exceptions import DecodeError, MessengerError, ReferenceCheckError

STATUS_CODES: dict[type[MessengerError], int] = {
    ReferenceCheckError: 400,
    MessengerError: 500,
}


def status_code_for(error: MessengerError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


async def messenger_error_handler(request: Request, exc: MessengerError) -> JSONResponse:
    return JSONResponse(status_code=status_code_for(exc), content={"message": exc.message})


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report an undecodable request body as a 'DecodeError'."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}" for error in exc.errors()
    )
    error = DecodeError(f"could not decode request body: {details}")
    logger.info(f"{request.url.path}: {error.message}")
    return await messenger_error_handler(request, error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"{request.url.path}: unhandled {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=500, content={"message": f"internal server error ({type(exc).__name__})"})
