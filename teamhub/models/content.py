"""Blog, meeting, paper and event report models

Meetings, papers and event reports arrive as multipart forms; the routes
build these models from the form fields so validation stays in one place.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

URL_PATTERN = re.compile(r"^https?://.+")


class LinkItem(BaseModel):
    title: str = Field(..., min_length=1)
    url: str

    @field_validator("title", "url")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not URL_PATTERN.match(v):
            raise ValueError("Please enter a valid URL starting with http:// or https://")
        return v


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    return [t.strip() for t in tags if t and t.strip()]


class BlogCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    author: str = Field(..., min_length=1)  # Role id
    date_published: Optional[datetime] = None
    links: List[LinkItem] = []
    tags: List[str] = []

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    author: Optional[str] = None
    date_published: Optional[datetime] = None
    links: Optional[List[LinkItem]] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class MeetingForm(BaseModel):
    """Meeting fields parsed from a multipart form"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    author: Optional[str] = None
    participants: Optional[List[str]] = None
    date_published: Optional[datetime] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class PaperForm(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    date_update: Optional[datetime] = None
    assignee: Optional[str] = Field(None, min_length=1, max_length=100)


class EventReportForm(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    date_updated: Optional[datetime] = None
    created_by: Optional[str] = Field(None, min_length=1, max_length=100)
