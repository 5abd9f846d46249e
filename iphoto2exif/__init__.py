from ._version import __version__
from .catalog import CatalogIndex, ImageRecord, load_catalog
from .dates import parse_date
from .errors import (
    BackupCopyError,
    CatalogParseError,
    DateFormatError,
    Iphoto2ExifError,
    TagReadError,
    TagWriteError,
    TimestampUpdateError,
)
from .reconcile import MetadataReconciler, ReconciliationPlan, compute_plan

__all__ = [
    "__version__",
    "BackupCopyError",
    "CatalogIndex",
    "CatalogParseError",
    "DateFormatError",
    "ImageRecord",
    "Iphoto2ExifError",
    "MetadataReconciler",
    "ReconciliationPlan",
    "TagReadError",
    "TagWriteError",
    "TimestampUpdateError",
    "compute_plan",
    "load_catalog",
    "parse_date",
]
