"""LingoPal — backend for AI-assisted English speaking practice.

Accounts and sessions, practice conversations, and a thin proxy to a
generative-AI service for replies, rephrasings, hints and practice sentences.
"""

__version__ = "0.1.0"
