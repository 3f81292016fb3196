"""Deploy Announce - GitHub workflow triggers and deployment announcements"""

__version__ = "1.0.0"
__description__ = "Trigger deployment workflows, announce results on Twitter/X and Discord, and auto-merge PRs"

__all__ = [
    "__version__",
    "__description__",
]
