from fastapi import Request, status
from fastapi.responses import JSONResponse

from errors import ErrorKind, StorefrontError

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INCOMPLETE_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorKind.PROCESSOR_DECLINED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.PAYMENT_DECLINED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.USER_CANCELLED: status.HTTP_409_CONFLICT,
    ErrorKind.PAYMENT_CANCELLED: status.HTTP_409_CONFLICT,
    ErrorKind.CAPTURE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.CONFIGURATION_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.PARTIAL_WRITE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, status.HTTP_400_BAD_REQUEST)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc.kind),
        content={"detail": exc.message, "kind": exc.kind.value},
    )
