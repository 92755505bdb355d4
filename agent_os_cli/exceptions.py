"""Exceptions shared across the CLI layers."""


class ConfigError(ValueError):
    """The effective configuration cannot be used (bad profile, no output enabled)."""


class PreflightError(RuntimeError):
    """The environment cannot support an installation; raised before any write."""


class ReinstallError(RuntimeError):
    """A re-install snapshot could not be taken or verified."""
