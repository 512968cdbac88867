"""
Engine exceptions.

The analyzers degrade to explained defaults for thin or messy data and never
raise for it. Only precondition violations (no dataset at all, rows that are
not mappings) and invalid explicit parameters are signalled to the caller.
"""


class DataSightError(Exception):
    """Base class for all engine errors."""

    code = "datasight_error"


class InvalidDatasetError(DataSightError, TypeError):
    """The dataset reference is missing or is not a sequence of row mappings."""

    code = "invalid_dataset"


class InvalidParameterError(DataSightError, ValueError):
    """An explicit parameter is out of its accepted range."""

    code = "invalid_parameter"
