"""Errors raised while building a schema model from catalog rows."""


class ModelError(ValueError):
    """Base class for failures that abort a model build."""


class ConsistencyError(ModelError):
    """A cross reference points at a table or column the model does not hold."""


class MalformedRowError(ModelError):
    """A catalog row lacks a field that cannot be defaulted."""
