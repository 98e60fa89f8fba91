"""
Exception hierarchy for the RegulateThis service.

    RegulateThisError
    ├── ContentAPIError
    └── NewsletterError
        ├── InvalidEmailError
        ├── AlreadySubscribedError
        └── SubscriberNotFoundError
"""

from __future__ import annotations

from typing import Optional


class RegulateThisError(Exception):
    """Base exception for all service errors."""


class ContentAPIError(RegulateThisError):
    """The headless CMS returned an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class NewsletterError(RegulateThisError):
    """Base class for subscribe/unsubscribe outcomes that are not successes."""

    status_code = 500


class InvalidEmailError(NewsletterError):
    status_code = 400

    def __init__(self, email: Optional[str] = None):
        super().__init__("Please provide a valid email address")
        self.email = email


class AlreadySubscribedError(NewsletterError):
    status_code = 409

    def __init__(self, email: str):
        super().__init__("This email is already subscribed")
        self.email = email


class SubscriberNotFoundError(NewsletterError):
    status_code = 404

    def __init__(self, email: str):
        super().__init__("Email address not found in our subscriber list")
        self.email = email
