"""
vendor-space: keep vendored dependencies for many branches of many repositories.
"""
from .config import RepoConfig, VendorSpace, load_config
from .errors import ErrorKind, VendorSpaceError
from .version import __version__

__all__ = ["ErrorKind", "RepoConfig", "VendorSpace", "VendorSpaceError", "__version__", "load_config"]
