"""
Results Log

Append-only CSV table of estimation results. One row per (sample,
classifier slot), always in the same column order.
"""
from pathlib import Path
from typing import Sequence, Tuple, Union

import pandas as pd

from sexest.core.container import DataType
from sexest.core.inference import EstimationResult
from sexest.utils import get_logger

logger = get_logger(__name__)

RESULT_HEADERS = {
    DataType.CSG_TOOLKIT: (
        "Sample ID", "bone", "side", "method", "classifier", "predicted sex", "posterior probability",
    ),
    DataType.VERTEBRAL: (
        "Sample ID", "population", "vertebra", "method", "classifier", "predicted sex", "posterior probability",
    ),
}


class ResultsLog:
    """
    CSV results file shared across sessions.

    A missing file is created with the header. An existing file whose layout
    is not the 7-column one is reset to the header before appending.
    """

    def __init__(self, path: Union[str, Path], datatype: DataType = DataType.CSG_TOOLKIT):
        self.path = Path(path)
        self.datatype = datatype
        self.header = RESULT_HEADERS[datatype]

    def _write_header(self) -> None:
        pd.DataFrame(columns=list(self.header)).to_csv(self.path, index=False)

    def _ensure_file(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_header()
            return
        try:
            columns = pd.read_csv(self.path, nrows=0).columns
        except pd.errors.EmptyDataError:
            columns = []
        if len(columns) != len(self.header):
            logger.warning(
                f"{self.path} has {len(columns)} columns instead of {len(self.header)}; "
                "starting a new results table"
            )
            self._write_header()

    def rows_for(
        self,
        sample_id: str,
        element: Tuple[str, str],
        results: Sequence[EstimationResult],
    ) -> list:
        """Build log rows in header order."""
        return [
            [sample_id, element[0], element[1], r.method.value, r.slot, r.sex.value, r.probability]
            for r in results
        ]

    def append(
        self,
        sample_id: str,
        element: Tuple[str, str],
        results: Sequence[EstimationResult],
    ) -> int:
        """
        Append one row per result.

        Args:
            sample_id: Sample identifier
            element: (bone, side) or (population, vertebra)
            results: Estimation results of the selected slots

        Returns:
            Number of rows written
        """
        self._ensure_file()
        rows = self.rows_for(sample_id, element, results)
        if rows:
            pd.DataFrame(rows, columns=list(self.header)).to_csv(
                self.path, mode="a", header=False, index=False
            )
        logger.info(f"Saved {len(rows)} result(s) for sample '{sample_id}' to {self.path}")
        return len(rows)

    def read(self) -> pd.DataFrame:
        """Read the whole results table."""
        self._ensure_file()
        return pd.read_csv(self.path, dtype={self.header[0]: str})
