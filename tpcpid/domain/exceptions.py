"""
Domain exceptions.
"""


class ConfigurationError(Exception):
    """Workflow configuration that cannot be run (fatal at startup)."""


class ParameterSourceError(Exception):
    """A parameter source could not deliver a usable named-bin bundle."""
