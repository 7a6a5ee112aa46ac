"""Exceptions raised by the authentication core and its collaborators.

Login outcomes (user not found, locked, bad password) are decision values,
not exceptions. These cover infrastructure faults that must propagate.
"""


class AuthServiceError(Exception):
    """Base class for auth service failures."""
    pass


class DirectoryUnavailableError(AuthServiceError):
    """The user directory could not be queried."""
    pass


class TokenError(AuthServiceError):
    """Access token is invalid, expired or revoked."""
    pass
