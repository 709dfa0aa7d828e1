"""Excepciones del dominio y handlers que las convierten en respuestas JSON."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from csv_service.core.config import Settings

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "Server encountered an unexpected error"
PRODUCTION_HINT = "Please try again later"


class ConversionError(Exception):
    """Error base de la canalización subida → conversión."""


class InvalidFileTypeError(ConversionError):
    def __init__(self, message: str = "Only CSV files are allowed"):
        super().__init__(message)


class FileTooLargeError(ConversionError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"File exceeds the maximum allowed size of {limit} bytes")


class CsvDecodeError(ConversionError):
    """El contenido no pudo leerse o no respeta la estructura del encabezado."""


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Registra los handlers que garantizan un cuerpo JSON con la clave ``error``.

    Args:
        app (FastAPI): Aplicación a configurar.
        settings (Settings): Configuración; decide si se expone el detalle del error.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Error no controlado en %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": UNEXPECTED_ERROR,
                "message": PRODUCTION_HINT if settings.is_production else str(exc),
            },
        )
