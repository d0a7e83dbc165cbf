# shop_service/responses.py
from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: Any = None, total: Optional[int] = None, message: Optional[str] = None,
            status_code: int = status.HTTP_200_OK) -> JSONResponse:
    body = {"success": True, "responseData": data}
    if total is not None:
        body["total"] = total
    if message:
        body["message"] = message
    body["responseMessage"] = "Successful"
    body["responseCode"] = "00"
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def created(data: Any, message: str) -> JSONResponse:
    return success(data, message=message, status_code=status.HTTP_201_CREATED)


def failure(error: str, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    body = {
        "success": False,
        "error": error,
        "responseMessage": "Failed",
        "responseCode": "99",
    }
    return JSONResponse(status_code=status_code, content=body, headers=headers)
