"""FinQuest: gamified personal-finance education API."""

__version__ = "1.0.0"
