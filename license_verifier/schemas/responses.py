from pydantic import BaseModel, Field


class VerifyOut(BaseModel):
    success: bool = Field(..., description="Whether activation is permitted")
    message: str = Field(..., description="Human-readable outcome")
