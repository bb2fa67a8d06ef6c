"""Version information for Delete GitHub Branches."""

__version__ = "2.0.0"
__description__ = (
    "Delete GitHub Branches - Delete stale branches of a GitHub repository by name patterns, "
    "pull request association, and inactivity"
)

PYTHON_REQUIRES = ">=3.10"
