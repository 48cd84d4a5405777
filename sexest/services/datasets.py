"""
CSG Dataset Reader

Reads CSG-Toolkit property tables (one bone per row, 47 columns, sample id
first) and turns every row into a sample with derived classifier features.
"""
from pathlib import Path
from typing import List, Union

import pandas as pd

from sexest.core.errors import DataError
from sexest.core.extraction import derive_features, trim_csg_row
from sexest.core.extraction.csg import CSG_TOOLKIT_COLUMNS
from sexest.core.inference import SampleRecord
from sexest.utils import get_logger

logger = get_logger(__name__)


def read_csg_table(path: Union[str, Path]) -> pd.DataFrame:
    """Read a CSG-Toolkit CSV and check its layout."""
    try:
        # sample ids stay text ("007" must not become 7.0)
        df = pd.read_csv(path, header=0, converters={0: str})
    except pd.errors.EmptyDataError as e:
        raise DataError(f"{path} is empty") from e
    if len(df) < 1 or df.shape[1] != CSG_TOOLKIT_COLUMNS:
        raise DataError(
            f"{path} is not a valid CSG properties container: expected at least one sample "
            f"and {CSG_TOOLKIT_COLUMNS} columns, got {len(df)} rows x {df.shape[1]} columns"
        )
    return df


def load_csg_dataset(path: Union[str, Path]) -> List[SampleRecord]:
    """
    Load every sample of a CSG-Toolkit CSV.

    Returns:
        SampleRecords in file order, features already derived (46 values)
    """
    df = read_csg_table(path)
    sample_ids = [str(sid).strip() for sid in df.iloc[:, 0]]
    features = derive_features(trim_csg_row(df.to_numpy(dtype=object)))
    records = [SampleRecord(sample_id=sid, features=row) for sid, row in zip(sample_ids, features)]
    logger.info(f"Loaded {len(records)} CSG samples from {path}")
    return records
