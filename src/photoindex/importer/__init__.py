"""Import pipeline — Per-owner photo import and periodic refresh sweeps."""

from photoindex.importer.scheduler import DAYS_BACK_TO_CHECK_FOR_UPDATES, RefreshScheduler
from photoindex.importer.worker import ImportReport, PhotoImporter

__all__ = ["DAYS_BACK_TO_CHECK_FOR_UPDATES", "ImportReport", "PhotoImporter", "RefreshScheduler"]
