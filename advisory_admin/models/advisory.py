"""Security advisory model."""

import datetime
from typing import List

from pydantic import BaseModel, Field


class Advisory(BaseModel):
    """Security advisory record from the advisory database."""

    id: str
    package: str
    date: datetime.date
    url: str | None = None
    title: str = ""
    description: str = ""
    categories: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    aliases: List[str] = Field(default_factory=list)
