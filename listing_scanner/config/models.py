"""Configuration schema models using Pydantic.

The YAML file accepts both snake_case keys and the camelCase names used by
older configs (``baseUrl``, ``numPosts``, ``postedToday``).
"""

import re
from enum import Enum
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator, model_validator

from listing_scanner.matching.engine import build_keyword_pattern

from .duration import DurationParseError, parse_duration, validate_duration_range

PAGE_SIZE = 25


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Keyword matching options."""

    word_boundaries: bool = Field(
        False,
        description="Only match keywords as whole words (default: plain substring match)",
    )


class EmailConfig(BaseModel):
    """Digest delivery settings."""

    recipients: str = Field(
        ..., min_length=1, description="Comma-separated list of recipient addresses"
    )
    subject: str = Field(..., min_length=1, description="Subject line of the digest")
    notify_when_empty: bool = Field(
        False, description="Send the digest even when no listing matched"
    )
    use_tls: bool = Field(True, description="Use STARTTLS/implicit TLS for SMTP")

    @field_validator("recipients")
    @classmethod
    def validate_recipients(cls, v: str) -> str:
        """Check every non-empty entry is a syntactically valid address."""
        addresses = [part.strip() for part in v.split(",") if part.strip()]
        if not addresses:
            raise ValueError("At least one recipient address is required")
        for address in addresses:
            try:
                validate_email(address, check_deliverability=False)
            except EmailNotValidError as e:
                raise ValueError(f"Invalid recipient address '{address}': {e}") from e
        return v.strip()

    @field_validator("subject")
    @classmethod
    def strip_subject(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("subject cannot be empty")
        return stripped


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """HTTP settings for the feed fetcher."""

    http_request_timeout: Optional[int] = Field(
        None,
        ge=1,
        le=300,
        description="Feed request timeout in seconds (unset: wait for the network)",
    )
    user_agent: str = Field(
        "ListingScanner/1.0", min_length=1, description="User-Agent for feed requests"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration passed explicitly into the pipeline."""

    base_url: str = Field(
        ..., alias="baseUrl", min_length=1, description="Feed search endpoint"
    )
    num_posts: int = Field(
        PAGE_SIZE,
        alias="numPosts",
        gt=0,
        description="Listings to retrieve per run, expected to be a multiple of 25",
    )
    keywords: List[str] = Field(
        ..., min_length=1, description="Case-insensitive keywords used for relevance"
    )
    posted_today: bool = Field(
        True, alias="postedToday", description="Restrict the feed to today's postings"
    )
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    email: EmailConfig = Field(..., description="Digest delivery settings")
    scan_interval: str = Field("24h", description="Interval between runs in daemon mode")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    # Computed field
    scan_interval_seconds: Optional[int] = None

    model_config = {"populate_by_name": True}

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("baseUrl cannot be empty or whitespace-only")
        return stripped

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: List[str]) -> List[str]:
        """Strip whitespace and drop empty keywords, keeping order."""
        keywords = [kw.strip() for kw in v if kw and kw.strip()]
        if not keywords:
            raise ValueError("keywords must contain at least one non-empty keyword")
        return keywords

    @field_validator("scan_interval")
    @classmethod
    def validate_scan_interval(cls, v: str) -> str:
        try:
            validate_duration_range(parse_duration(v))
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def validate_pattern_and_compute_fields(self):
        """Compile the keyword alternation once so bad fragments fail at load time."""
        try:
            build_keyword_pattern(self.keywords, self.matching.word_boundaries)
        except re.error as e:
            raise ValueError(f"keywords do not form a valid pattern: {e}") from e

        self.scan_interval_seconds = parse_duration(self.scan_interval)
        return self
