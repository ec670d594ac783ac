"""
Detecting the tooling's own version.

The codebase does not contain the version directly: releases depend on
tagging rather than in-code version bumps (see ``setuptools_scm`` in setup).

The version is determined only once at startup when the code is loaded.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "curito", unless renamed/forked.
        version = importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        pass  # running from a source checkout, not installed.
