# Path: core/indexing/__init__.py
# Purpose: Package initializer for indexing utilities.
# Layer: core/indexing.
# Details: Exposes scanning, variant generation, optimisation, publishing, and watching helpers.

from .handle import IndexGeneration, IndexHandle, ReadWriteLock
from .loader import ImageLoader
from .maintenance import remove_derivatives
from .optimiser import Optimiser
from .resize import VariantGenerator
from .scanner import ImageScanner
from .watcher import ChangeWatcher, WatcherState

__all__ = [
    "ChangeWatcher",
    "ImageLoader",
    "ImageScanner",
    "IndexGeneration",
    "IndexHandle",
    "Optimiser",
    "ReadWriteLock",
    "VariantGenerator",
    "WatcherState",
    "remove_derivatives",
]
