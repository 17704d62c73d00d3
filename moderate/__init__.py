"""
Moderate - moderation queue for issue tracker submissions.

New issues and notes from users below a trust threshold are held in a
queue until a moderator approves, rejects or flags them as spam.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
