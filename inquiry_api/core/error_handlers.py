from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inquiry_api.core.exceptions import InquiryError


async def inquiry_error_handler(request: Request, exc: InquiryError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InquiryError, inquiry_error_handler)
