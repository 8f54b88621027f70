from __future__ import annotations


class MailDispatchError(Exception):
    """Base class for errors raised by the mail dispatcher."""


class ConfigurationError(MailDispatchError):
    """Setup step attempted without the input it needs (e.g. no authorization code)."""


class AuthenticationError(MailDispatchError):
    """No stored OAuth credential to act with."""
