"""Errors raised by the learning scheduler."""


class WordLearnError(Exception):
    """Base class for all scheduler errors."""


class ValidationError(WordLearnError, ValueError):
    """Invalid input: an empty word set, a bad word or an invalid setting."""


class DataError(WordLearnError):
    """An operation was attempted against a session that cannot accept it."""


class EmptySelectionError(WordLearnError):
    """No candidate words are available for a session."""


class RepositoryError(WordLearnError):
    """A persistence collaborator failed.

    The original exception is kept as ``__cause__``; the core does not
    interpret it.
    """
