"""
This package contains the core logic for building distribution packages
(.deb, .rpm and zipped .app bundles) from staging folders, and for
extracting Debian binary packages back into their content trees.
"""

from .models import AR_MAGIC, DEBIAN_BINARY_VERSION, ArMemberKind
from .packaging.orchestrator import BuildOrchestrator
from .packaging.reader import DebReader
from .packaging.rpm import RpmBuilder
from .policy import Permission, classify

__all__ = [
    "AR_MAGIC",
    "DEBIAN_BINARY_VERSION",
    "ArMemberKind",
    "BuildOrchestrator",
    "DebReader",
    "Permission",
    "RpmBuilder",
    "classify",
]
