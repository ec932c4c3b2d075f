from typing import Any, Optional

from pydantic import BaseModel, Field


class ItemResponse(BaseModel):
    key: str
    value: Any
    # False when the value was served but refused by the validator
    cached: bool


class ItemWrite(BaseModel):
    value: Any
    ttl: Optional[float] = Field(default=None, gt=0, description="seconds; defaults to DEFAULT_TTL_SEC")


class Health(BaseModel):
    status: str = "ok"
    uptime: Optional[float] = None


class ErrorModel(BaseModel):
    detail: str
