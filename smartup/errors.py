"""Exceptions raised by SmartUp."""


class SmartUpError(Exception):
    """Base class for SmartUp errors."""


class ManifestError(SmartUpError):
    """The manifest is missing or is not a JSON object."""


class ResolutionError(SmartUpError):
    """Querying the registry for available versions failed."""


class SelectionError(SmartUpError):
    """A selection named packages that are not in the update catalog."""


class MutationInconsistency(SmartUpError):
    """A selected package is declared in neither dependency section."""
