"""
morexport/errors.py
Exception taxonomy for an export run.

Everything on the tunnel/query path is fatal: the run stops once acquired
resources are released. ValidationError is the only one meant for the user
and is raised before any network activity.
"""


class ExporterError(Exception):
    """Base class for every error an export run can raise."""


class ConfigError(ExporterError):
    """Missing or invalid connection settings."""


class SSHKeyError(ExporterError):
    """Private key unreadable, or passphrase missing / wrong."""


class TunnelError(ExporterError):
    """SSH dial, authentication or channel failure."""


class QueryError(ExporterError):
    """Statement execution or row decoding failure."""


class ValidationError(ExporterError):
    """Bad user input (date format, inverted window)."""
