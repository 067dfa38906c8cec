"""
prmerge - Merge open pull requests onto a local integration branch.

Collects a repository's open PRs from GitHub and merges them one by one onto
a freshly created branch so they can be tested together.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from prmerge.core.config.models import RunConfig
from prmerge.core.merge import MergeOutcome, MergeState

__all__ = ["MergeOutcome", "MergeState", "RunConfig", "__version__"]
