
from typing import Any, Dict, Optional

import pandas as pd
from sqlalchemy import and_, case, column, literal, select, table, text
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.sql import Select

from telco_churn.utils.logger import setup_logger
from telco_churn.analysis.features import ChurnConfig
from telco_churn.database.models import telco_churn
from telco_churn.database.init_db import get_engine

logger = setup_logger("Analysis_View")

c = telco_churn.c

def tenure_group_expression():
    """CASE expression bucketing tenure into the four documented ranges."""
    whens = []
    for label, lower, upper in ChurnConfig.TENURE_BUCKETS:
        bounds = []
        if lower is not None:
            bounds.append(c.tenure > lower)
        if upper is not None:
            bounds.append(c.tenure <= upper)
        whens.append((and_(*bounds), literal(label)))
    return case(*whens)

def build_view_select() -> Select:
    """All source columns plus Tenure_Group, Churn_Count and High_Value_User."""
    return select(
        *[col.label(col.name) for col in telco_churn.columns],
        tenure_group_expression().label(ChurnConfig.TENURE_GROUP),
        # Binary churn for dashboard sums
        case((c.Churn == 'Yes', 1), else_=0).label(ChurnConfig.CHURN_COUNT),
        case((c.MonthlyCharges > ChurnConfig.HIGH_VALUE_THRESHOLD, 'Yes'), else_='No').label(ChurnConfig.HIGH_VALUE_USER),
    )

def compile_view_ddl(dialect: Dialect) -> str:
    query = build_view_select().compile(dialect=dialect, compile_kwargs={"literal_binds": True})
    return f"CREATE VIEW {ChurnConfig.VIEW_NAME} AS {query}"

def create_view(engine: Optional[Engine] = None) -> None:
    """(Re)creates vw_churn_data for the dashboard. A projection, not a copy."""
    engine = engine or get_engine()
    try:
        with engine.begin() as conn:
            conn.execute(text(f"DROP VIEW IF EXISTS {ChurnConfig.VIEW_NAME}"))
            conn.execute(text(compile_view_ddl(engine.dialect)))
        logger.info(f"View '{ChurnConfig.VIEW_NAME}' created.")
    except Exception as e:
        logger.error(f"View creation failed: {e}")
        raise

def churn_view():
    """Lightweight handle on the view for read queries."""
    return table(ChurnConfig.VIEW_NAME, *[column(name) for name in ChurnConfig.get_view_columns()])

def fetch_view(engine: Optional[Engine] = None, limit: Optional[int] = None, offset: int = 0) -> pd.DataFrame:
    engine = engine or get_engine()
    view = churn_view()
    query = select(view).order_by(view.c.customerID)
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    with engine.connect() as conn:
        return pd.read_sql(query, conn)

def fetch_customer(customer_id: str, engine: Optional[Engine] = None) -> Optional[Dict[str, Any]]:
    """First view row for a customerID, or None."""
    engine = engine or get_engine()
    view = churn_view()
    query = select(view).where(view.c.customerID == customer_id).limit(1)
    with engine.connect() as conn:
        row = conn.execute(query).mappings().first()
    return dict(row) if row else None

if __name__ == "__main__":
    create_view()
