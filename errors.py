# FILE: errors.py
# Exceptions raised by the deploy modules. Only deploy.main() turns them
# into "FATAL:" output.


class WidgetDeployError(Exception):
    """Base class for every failure that aborts a deploy run."""


class AuthenticationFailure(WidgetDeployError):
    pass


class VendorApiError(WidgetDeployError):
    """The vendor answered with an `error` field or an unreadable body."""


class FileSystemError(WidgetDeployError):
    pass


class ArgumentError(WidgetDeployError):
    pass
