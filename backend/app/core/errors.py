r"""backend/app/core/errors.py

Domain exceptions shared by the prediction services and the HTTP layer."""

from __future__ import annotations


class ParseError(ValueError):
    """Raised when a predictor response is structurally unusable."""


class ConfigurationError(RuntimeError):
    """Raised when required environment configuration is missing.

    Messages always mention ``environment variable`` so the HTTP layer (and
    its callers) can tell a misconfigured server from a failed prediction.
    """


class PersistenceError(RuntimeError):
    """Raised when the prediction store cannot complete an operation."""
