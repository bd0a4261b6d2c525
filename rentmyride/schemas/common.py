from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Shape of every JSON response."""

    ok: bool = True
    code: Optional[str] = None
    message: Optional[str] = None
    data: Optional[T] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    next_cursor: Optional[str] = None
