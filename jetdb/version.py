"""Library version."""

VERSION = "1.0.0"


def get_version() -> str:
    """Return the library version string."""
    return VERSION