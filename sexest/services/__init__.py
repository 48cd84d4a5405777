"""
Services Module

I/O around the core engine: container loading, CSG datasets, the results
log and the estimation service used by the API and the CLI.
"""
from .containers import load_container
from .datasets import load_csg_dataset, read_csg_table
from .results_log import ResultsLog, RESULT_HEADERS
from .estimation import EstimationService

__all__ = [
    "load_container",
    "load_csg_dataset",
    "read_csg_table",
    "ResultsLog",
    "RESULT_HEADERS",
    "EstimationService",
]
