from pydantic import BaseModel


class InquiryResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
