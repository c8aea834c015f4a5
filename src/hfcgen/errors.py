"""
Error kinds raised while building an Instrument Model.

All of these are fatal: the pipeline stops and no script is written.
Recoverable conditions (odd choice codes, missing Stata labels, unknown
question types) never raise; they fall back and are logged instead.
"""


class InstrumentError(Exception):
    """Base class for instrument problems that abort generation."""
    pass


class MalformedInstrument(InstrumentError):
    """Raised when repeat markers cannot form a consistent set of groups."""
    pass


class MissingRequiredColumn(InstrumentError):
    """Raised when a sheet lacks a column the loaders depend on."""
    pass


class AmbiguousDataset(InstrumentError):
    """Raised when a question has no single innermost repeat group."""
    pass


__all__ = [
    "InstrumentError",
    "MalformedInstrument",
    "MissingRequiredColumn",
    "AmbiguousDataset",
]
