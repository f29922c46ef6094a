"""Errors raised while releasing a pull request."""


class ReleaserError(RuntimeError):
    """Base class for failures that stop a release."""


class ConfigError(ReleaserError):
    """Missing credentials, malformed target or unknown project/column."""


class StateError(ReleaserError):
    """The pull request is not in a releasable state."""


class WorkspaceError(ReleaserError):
    """The local repository cache could not be prepared."""


class NoTargetBranchError(ReleaserError):
    """None of the requested branches applies to the repository."""


class FatalBranchError(ReleaserError):
    """A cherry-pick or push failed in a way that needs a human."""


class NotificationError(ReleaserError):
    """A linked issue could not be commented on. Never propagated."""


class HostingError(ReleaserError):
    """GitHub could not be asked about a pull request or issue."""
