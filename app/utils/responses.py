# app/utils/responses.py
from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.errors import AuthError


def success_response(data: Any = None, message: str = "", status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"status": "success", "message": message, "data": data}),
    )


def error_response(
    message: str = "",
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: Optional[Dict[str, List[str]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, "errors": errors},
        headers=headers,
    )


def auth_error_response(error: AuthError) -> JSONResponse:
    return error_response(error.message, error.status_code, error.errors)
