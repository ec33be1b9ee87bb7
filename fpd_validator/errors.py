"""Exception types raised by fpd_validator.

The filtering traversal itself never raises: a nonconforming field is
dropped and a diagnostic is emitted.  These errors cover caller contract
violations at the entry point and malformed schema tables at load time.
"""

from __future__ import annotations


class FpdValidatorError(Exception):
    """Base class for all fpd_validator errors."""


class InvalidInputError(FpdValidatorError, ValueError):
    """The data record handed to the engine is not well formed.

    Raised when ``data`` is not a mapping, ``data["bidder"]`` is not a
    mapping of bidder name to object, or ``data["global"]`` is neither a
    mapping nor ``None``.
    """


class SchemaError(FpdValidatorError, ValueError):
    """A schema table could not be parsed into field descriptors."""
