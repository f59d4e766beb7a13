"""Error taxonomy for the dependency installer."""


class InstallerError(Exception):
    """Base class for all dependency installer errors."""


class ConfigError(InstallerError):
    """A manifest could not be read or failed validation."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class ResolutionError(InstallerError):
    """A download link could not be synthesized for a declaration."""


class InstallError(InstallerError):
    """Downloading, unpacking or moving an artifact failed."""


class ActivationError(InstallerError):
    """The host refused to activate a plugin."""


class InstallerPermissionError(InstallerError):
    """The acting user may not install or activate plugins."""
