from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarHTTP
import logging

from .engine import RuleSetValidationError, ToolNotConfigured

logger = logging.getLogger("tooleval")

def install_error_handlers(app):
    @app.exception_handler(StarHTTP)
    async def http_exc(_: Request, exc: StarHTTP):
        return JSONResponse({"error": f"HTTP_{exc.status_code}", "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(RuleSetValidationError)
    async def invalid_rule_set(_: Request, exc: RuleSetValidationError):
        return JSONResponse({"error": "INVALID_RULE_SET", "detail": exc.problems}, status_code=422)

    @app.exception_handler(ToolNotConfigured)
    async def not_configured(_: Request, exc: ToolNotConfigured):
        return JSONResponse(
            {
                "error": "NOT_CONFIGURED",
                "detail": str(exc),
                "projectId": exc.project_id,
                "version": exc.version,
                "calculationEnabled": False,
            },
            status_code=409,
        )

    @app.exception_handler(Exception)
    async def unhandled(_: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse({"error": "INTERNAL_ERROR", "detail": "Unexpected error"}, status_code=500)
