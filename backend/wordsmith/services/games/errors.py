"""
Game error hierarchy.

Every failure the game core can report is one of these four conditions.
The HTTP layer maps them onto status codes in one place.
"""


class WordsmithError(Exception):
    """Base class for all recoverable game errors."""
    status_code = 400

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class NotFound(WordsmithError):
    """Unknown game, round, poem, player or user id."""
    status_code = 404

    def __init__(self, kind, ident):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident} not found")


class InvalidTransition(WordsmithError):
    """Round or poem state machine violation."""
    status_code = 409


class NotAuthorized(WordsmithError):
    """Actor is not allowed to perform this action (e.g. non-judge)."""
    status_code = 403


class ValidationError(WordsmithError):
    """Bad input: empty poem, roster too small, too many words, duplicate username."""
    status_code = 400
