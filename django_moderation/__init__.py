"""
Django Reusable Moderation
==========================

A reusable Django app for moderating community content: a moderator queue for
flagged and reported comments, a decision engine with an immutable audit trail,
and report resolution.
"""

__version__ = '1.0.0'
