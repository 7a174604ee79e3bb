"""Ghost digest pipeline: builds a draft digest post from recently published posts."""

__version__ = "0.1.0"
