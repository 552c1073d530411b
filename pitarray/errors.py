"""Exceptions raised by pitarray."""


class ConfigurationError(ValueError):
    """
    Invalid array configuration request.

    Raised before any record is transformed: missing or conflicting
    parameters, unsupported multi-antenna renames, or renaming by array on
    data that has no array configuration yet.
    """
