class PreferenceEngineError(Exception):
    """Base class for errors raised by the preference engine."""


class CommandError(PreferenceEngineError):
    """A command or its arguments were rejected before anything changed."""


class PersistenceError(PreferenceEngineError):
    """The session repository could not read or write the state document."""


class EntitySourceError(PreferenceEngineError):
    """An entity file could not be read or holds no records."""
