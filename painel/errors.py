import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

logger = logging.getLogger(__name__)


class PainelError(Exception):
    """Erro base da aplicação; `message` é exibida ao usuário."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PainelError):
    pass


class InvalidRange(ValidationError):
    pass


class MissingBound(ValidationError):
    pass


class DataUnavailable(PainelError):
    pass


class Unauthorized(PainelError):
    def __init__(self, message: str, redirect_to: str = "/auth/login-page"):
        super().__init__(message)
        self.redirect_to = redirect_to


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})

    @app.exception_handler(DataUnavailable)
    async def _data_unavailable(request: Request, exc: DataUnavailable):
        logger.error("Banco indisponível em %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message},
        )

    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized):
        return RedirectResponse(url=exc.redirect_to, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
