"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """A setting, or a combination of settings, cannot be used."""

    def __init__(self, setting: str, message: str) -> None:
        self.setting = setting
        super().__init__(f"{setting}: {message}")


class DependencyInjectionError(UtilError):
    """A container cannot be assembled for the requested components."""

    def __init__(self, message: str, component: str | None = None) -> None:
        self.component = component
        super().__init__(message)
