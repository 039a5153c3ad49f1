import math

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
