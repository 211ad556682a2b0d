"""
Pydantic schemas for the standalone newsletter subscription endpoint.
"""

from typing import Optional
from pydantic import BaseModel


class SubscribeRequest(BaseModel):
    email: Optional[str] = None


class SubscribeResponse(BaseModel):
    success: bool = True
    message: str = "Successfully subscribed to our newsletter!"
