"""Error types raised by the profile and session state layers."""


class ProfileError(RuntimeError):
    """Base class for profile subsystem failures."""


class ValidationError(ProfileError):
    """Raised for user-correctable problems such as a bad or duplicate name."""


class NotFoundError(ProfileError):
    """Raised when a profile or its backing directory does not exist."""


class FormatError(ProfileError):
    """Raised when a JSON document on disk cannot be interpreted."""
