"""Exception types raised by uainfo.

Exceptions are reserved for environment and configuration problems.
An unrecognized user agent is never an error, it is a classification
with IdentificationLevel.NONE.
"""


class ConfigurationError(ValueError):
    """The configured environment cannot be used.

    Raised when a source definition file is missing or unreadable at load
    time, or when the configured shared cache does not implement get/set.
    """


class SourceUnavailable(RuntimeError):
    """The signature source returned no data at all for a lookup."""


class MalformedOverrideRule(ValueError):
    """An override rule references a capture group its pattern does not have.

    Only raised and handled inside the override rule engine.
    """


class CacheTierFailure(RuntimeError):
    """A call to the shared cache tier failed.

    Used for logging; the identity cache treats the failure as a miss.
    """
