
from typing import Iterable, List, Optional

import pandas as pd
from sqlalchemy.engine import Engine

from telco_churn.utils.config import settings
from telco_churn.utils.errors import SchemaMismatchError
from telco_churn.utils.logger import setup_logger
from telco_churn.analysis.features import ChurnConfig
from telco_churn.database.init_db import get_engine

logger = setup_logger("ETL_Ingest")

def find_missing_columns(columns: Iterable[str], required: Iterable[str]) -> List[str]:
    """Returns required columns absent from `columns`, preserving required order."""
    present = {str(col).strip() for col in columns}
    return [col for col in required if col not in present]

def load_raw_data(filepath: str) -> pd.DataFrame:
    """
    Reads the raw CSV file the way a bulk SQL load would: every value as text,
    no NA inference, so blank TotalCharges survive for the cleaning step.
    """
    try:
        logger.info(f"Reading raw data from {filepath}")
        df = pd.read_csv(filepath, dtype=str, keep_default_na=False)
        logger.info(f"Successfully read {len(df)} rows.")
    except Exception as e:
        logger.error(f"Error reading file: {e}")
        raise

    df.columns = df.columns.str.strip()

    missing = find_missing_columns(df.columns, ChurnConfig.COLUMNS)
    if missing:
        logger.error(f"Raw file is missing columns: {missing}")
        raise SchemaMismatchError(missing)

    extra = [c for c in df.columns if c not in ChurnConfig.COLUMNS]
    if extra:
        logger.warning(f"Dropping unexpected columns: {extra}")

    df = df[ChurnConfig.COLUMNS].copy()

    # Numeric columns typed as the table declares them; unparseable values become NULL
    for col in ChurnConfig.INTEGER_COLUMNS:
        values = pd.to_numeric(df[col].str.strip(), errors='coerce')
        fractional = values.notna() & (values % 1 != 0)
        if fractional.any():
            logger.warning(f"Nulling {int(fractional.sum())} non-integer values in '{col}'")
        df[col] = values.where(~fractional).astype("Int64")
    for col in ChurnConfig.DECIMAL_COLUMNS:
        # DECIMAL(10, 2) scale, which SQLite does not enforce itself
        df[col] = pd.to_numeric(df[col].str.strip(), errors='coerce').round(2)

    return df

def push_to_db(df: pd.DataFrame, engine: Optional[Engine] = None) -> int:
    """Appends the raw rows into the telco_churn table. Returns rows written."""
    engine = engine or get_engine()

    try:
        with engine.connect() as conn:
            logger.info("Connected to database.")
            logger.info(f"Loading '{ChurnConfig.TABLE_NAME}' table...")
            df[ChurnConfig.COLUMNS].to_sql(ChurnConfig.TABLE_NAME, con=conn, if_exists='append', index=False)
            conn.commit()
        logger.info(f"Loaded {len(df)} rows.")
        return len(df)

    except Exception as e:
        logger.error(f"Database load failed: {e}")
        raise

if __name__ == "__main__":
    try:
        data = load_raw_data(settings.RAW_DATA_PATH)
        push_to_db(data)
        logger.info("Data ingestion complete.")
    except Exception as e:
        logger.error(f"Ingestion Failed: {e}")
        raise
