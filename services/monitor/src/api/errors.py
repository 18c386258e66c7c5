from fastapi.responses import JSONResponse


def error_response(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    """Error envelope shared by every endpoint: ``{"code", "message", ...}``."""
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "message": message, **extra},
    )
