"""
Errores de negocio del POS

Los servicios lanzan estas excepciones sin conocer HTTP; el handler
registrado en main.py las traduce a respuestas JSON con el status_code
de cada clase.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class PosError(Exception):
    """Error base del dominio POS"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(PosError):
    status_code = status.HTTP_404_NOT_FOUND


class RegisterNotFoundError(NotFoundError):
    pass


class LayawayNotFoundError(NotFoundError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class InvalidStateError(PosError):
    """Transición de estado no permitida (ej. cerrar una caja cerrada)"""
    status_code = status.HTTP_409_CONFLICT


class RegisterAlreadyOpenError(InvalidStateError):
    pass


class InvalidAmountError(PosError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class DuplicateMovementError(PosError):
    status_code = status.HTTP_409_CONFLICT


async def pos_error_handler(request: Request, exc: PosError) -> JSONResponse:
    logger.debug(f"{type(exc).__name__} en {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
