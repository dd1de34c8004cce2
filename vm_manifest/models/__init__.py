"""Domain models for the VM manifest importer.

This package contains the domain model classes used throughout the pipeline:
configuration, normalized rows, emitted machine records and run results.
"""

from .config_models import ManifestConfig
from .error_record import ErrorRecord
from .inventory import DatacenterContext
from .machine_record import OUTPUT_FIELDS, MachineRecord
from .processing_result import ProcessingResult, RowCounters
from .row_data import RowData

__all__ = [
    # Configuration models
    "ManifestConfig",
    "DatacenterContext",
    # Processing models
    "RowData",
    "MachineRecord",
    "OUTPUT_FIELDS",
    "ProcessingResult",
    "RowCounters",
    "ErrorRecord",
]
