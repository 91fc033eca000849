from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    """Success envelope: {"statusCode", "data", "message", "success": true}."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "statusCode": status_code,
            "data": data if data is not None else {},
            "message": message,
            "success": status_code < 400,
        }),
    )
