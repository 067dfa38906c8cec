"""
Configuration data model for prmerge.

A RunConfig is built once at startup from defaults, config files,
environment variables and command-line flags, then passed to every
component. It is frozen so nothing can change it mid-run.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prmerge.core.github.api import DEFAULT_API_URL, DEFAULT_MAX_PAGES


class RunConfig(BaseModel):
    """
    Settings for a single prmerge run.

    Example:
        >>> config = RunConfig(folder=Path("."), branch="integration", label="ready")
        >>> config.base
        'master'
    """
    # Positional arguments
    folder: Path = Field(
        ...,
        description="Local folder containing the git checkout"
    )
    branch: str = Field(
        ...,
        min_length=1,
        description="Branch to (re)create; an existing branch is overwritten"
    )

    # Repository and API
    auth: Optional[str] = Field(
        default=None,
        repr=False,
        description="GitHub credentials as 'user:password' or 'user:token'"
    )
    remote: str = Field(
        default="origin",
        min_length=1,
        description="git remote used to talk to GitHub"
    )
    base: str = Field(
        default="master",
        min_length=1,
        description="Base branch the PRs target and the new branch starts from"
    )
    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="GitHub REST API base URL"
    )
    max_pages: int = Field(
        default=DEFAULT_MAX_PAGES,
        ge=0,
        description="Maximum number of API pages fetched per list request"
    )

    # Filtering
    label: Optional[str] = Field(
        default=None,
        description="Only merge PRs carrying this label"
    )
    trusted_only: bool = Field(
        default=False,
        description="With a label, only merge PRs whose author can push"
    )

    # Merge behavior
    continue_on_failure: bool = Field(
        default=False,
        description="Skip PRs that fail to merge instead of stopping"
    )

    # Process control
    http_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds before an API request times out (no timeout if unset)"
    )
    git_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds before a git command is killed (no timeout if unset)"
    )
    quiet: bool = Field(
        default=False,
        description="Capture git output instead of streaming it"
    )

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    @field_validator("label", "auth", mode="before")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty string as not set."""
        if isinstance(v, str) and not v:
            return None
        return v
