"""CLI package.

The ``cli`` sub-package contains the Click application and all
command implementations.
"""
from __future__ import annotations
