
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import MetaData, Numeric, cast, func, inspect, insert, select, text, update
from sqlalchemy.engine import Connection, Engine

from telco_churn.utils.logger import setup_logger
from telco_churn.analysis.features import ChurnConfig
from telco_churn.database.models import CHARGE_TYPE, build_churn_table, telco_churn
from telco_churn.database.init_db import get_engine
from telco_churn.etl.quality import assert_no_missing_total_charges

logger = setup_logger("ETL_Cleaning")

c = telco_churn.c

class CleaningSummary(BaseModel):
    blanks_nulled: int
    column_retyped: bool
    nulls_zeroed: int

def normalize_blank_total_charges(conn: Connection) -> int:
    """Blank TotalCharges (zero-tenure customers) become NULL before the type change."""
    result = conn.execute(
        update(telco_churn)
        .where(func.trim(c.TotalCharges) == '')
        .values(TotalCharges=None)
    )
    logger.info(f"Set {result.rowcount} blank TotalCharges to NULL.")
    return result.rowcount

def _total_charges_is_numeric(conn: Connection) -> bool:
    columns = {col["name"]: col["type"] for col in inspect(conn).get_columns(ChurnConfig.TABLE_NAME)}
    return isinstance(columns["TotalCharges"], Numeric)

def coerce_total_charges(conn: Connection) -> bool:
    """
    Switches TotalCharges to DECIMAL(10, 2). Returns False if it already is.

    MySQL alters the column in place. SQLite cannot change a column type, so
    the table is rebuilt: copy into a typed twin with CAST, drop, rename.
    """
    if _total_charges_is_numeric(conn):
        logger.info("TotalCharges is already numeric.")
        return False

    if conn.dialect.name == "mysql":
        conn.execute(text(f"ALTER TABLE {ChurnConfig.TABLE_NAME} MODIFY COLUMN TotalCharges DECIMAL(10, 2)"))
        logger.info("Altered TotalCharges to DECIMAL(10, 2).")
        return True

    typed_name = f"{ChurnConfig.TABLE_NAME}_typed"
    typed = build_churn_table(typed_name, MetaData(), total_charges_type=CHARGE_TYPE)

    # The view references the old table
    conn.execute(text(f"DROP VIEW IF EXISTS {ChurnConfig.VIEW_NAME}"))
    typed.drop(conn, checkfirst=True)
    typed.create(conn)

    source_cols = [
        cast(col, CHARGE_TYPE).label(col.name) if col.name == "TotalCharges" else col
        for col in telco_churn.columns
    ]
    conn.execute(insert(typed).from_select([col.name for col in typed.columns], select(*source_cols)))
    telco_churn.drop(conn)
    conn.execute(text(f"ALTER TABLE {typed_name} RENAME TO {ChurnConfig.TABLE_NAME}"))
    logger.info("Rebuilt telco_churn with TotalCharges as DECIMAL(10, 2).")
    return True

def fill_missing_total_charges(conn: Connection) -> int:
    """New customers (tenure 0) have nothing billed yet: NULL TotalCharges become 0."""
    result = conn.execute(
        update(telco_churn)
        .where(c.TotalCharges.is_(None))
        .values(TotalCharges=0)
    )
    logger.info(f"Set {result.rowcount} NULL TotalCharges to 0.")
    return result.rowcount

def clean_table(engine: Optional[Engine] = None) -> CleaningSummary:
    """
    Runs the cleaning statements in order inside one transaction.

    On SQLite a failure rolls back every step, the table rebuild included.
    On MySQL the ALTER TABLE commits implicitly, so the blank-to-NULL update
    before it is already durable if a later step fails. Re-running is safe
    since every step is idempotent.
    """
    engine = engine or get_engine()
    logger.info("Starting data cleaning...")

    try:
        with engine.begin() as conn:
            blanks = normalize_blank_total_charges(conn)
            retyped = coerce_total_charges(conn)
            zeroed = fill_missing_total_charges(conn)
            assert_no_missing_total_charges(conn)
    except Exception as e:
        logger.error(f"Data cleaning failed: {e}")
        raise

    logger.info("Data cleaning completed.")
    return CleaningSummary(blanks_nulled=blanks, column_retyped=retyped, nulls_zeroed=zeroed)
