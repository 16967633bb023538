"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- ShortURL: mapping between a hash key and its target URL
- Click: one row per admitted redirect, for analytics

Design Decisions:
- The hash key is the public identifier (unique index, most common lookup)
- Clicks live in their own table so they can be partitioned or moved to a
  time-series store independently
- Redirect counters are NOT persisted: they live in the in-process
  RedirectionLimiter
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlmodel import Column, Field, SQLModel

TEMPORARY_REDIRECT = 307
PERMANENT_REDIRECT = 301


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlSafety(str, Enum):
    """Safe Browsing verdict for a target URL."""
    SAFE = "safe"
    UNSAFE = "unsafe"
    UNKNOWN = "unknown"


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - url_hash: Public key of the short URL (8 hex chars by default)
    - target: The long URL to redirect to
    - mode: HTTP status used for the redirect (307 temporary, 301 permanent)
    - safety: Safe Browsing verdict at creation time
    - ip / country: Creator information
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    url_hash: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True, index=True)
    )
    target: str = Field(sa_column=Column(Text, nullable=False))
    mode: int = Field(
        default=TEMPORARY_REDIRECT,
        sa_column=Column(Integer, nullable=False, default=TEMPORARY_REDIRECT)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    owner: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))
    sponsor: Optional[str] = Field(default=None, sa_column=Column(String(200), nullable=True))
    safety: str = Field(
        default=UrlSafety.UNKNOWN.value,
        sa_column=Column(String(10), nullable=False, default=UrlSafety.UNKNOWN.value)
    )
    ip: Optional[str] = Field(default=None, sa_column=Column(String(45), nullable=True))  # IPv6 max length
    country: Optional[str] = Field(default=None, sa_column=Column(String(2), nullable=True))

    @property
    def is_safe(self) -> bool:
        return self.safety == UrlSafety.SAFE.value


class Click(SQLModel, table=True):
    """
    Click log table for redirect analytics.

    One row per admitted redirect. Denied redirects (429) are not recorded.
    """
    __tablename__ = "clicks"

    id: Optional[int] = Field(default=None, primary_key=True)
    url_hash: str = Field(sa_column=Column(String(100), nullable=False, index=True))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    ip: Optional[str] = Field(default=None, sa_column=Column(String(45), nullable=True))
    referrer: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))
    browser: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))
    platform: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))
    country: Optional[str] = Field(default=None, sa_column=Column(String(2), nullable=True))
