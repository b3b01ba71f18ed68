
from typing import Dict, List, Optional

from pydantic import BaseModel, computed_field
from sqlalchemy import Numeric, case, cast, distinct, func, or_, select, table, column
from sqlalchemy.engine import Connection, Engine

from telco_churn.utils.config import settings
from telco_churn.utils.errors import DataQualityError
from telco_churn.utils.logger import setup_logger
from telco_churn.analysis.features import ChurnConfig
from telco_churn.database.models import telco_churn
from telco_churn.database.init_db import get_engine

logger = setup_logger("ETL_Quality")

c = telco_churn.c

class DuplicateCustomer(BaseModel):
    customer_id: str
    duplicate_count: int

class MissingValueProfile(BaseModel):
    total_rows: int
    missing_total_charges: int
    missing_monthly_charges: int
    missing_internet_service: int
    missing_contract: int
    missing_churn_label: int

class CategoricalProfile(BaseModel):
    column: str
    values: List[Optional[str]]
    unexpected: List[Optional[str]]

class QualityReport(BaseModel):
    missing: MissingValueProfile
    duplicates: List[DuplicateCustomer]
    categoricals: List[CategoricalProfile]

    @computed_field
    @property
    def is_clean(self) -> bool:
        return not self.duplicates and not any(p.unexpected for p in self.categoricals)

    def findings(self) -> Dict[str, object]:
        """Summary of everything that would fail a strict run."""
        return {
            "duplicate_customers": [d.customer_id for d in self.duplicates],
            "unexpected_values": {p.column: p.unexpected for p in self.categoricals if p.unexpected},
        }

class ViewConsistency(BaseModel):
    total_rows: int
    churn_count_mismatches: int
    high_value_mismatches: int
    unclassified_tenure: int

    @property
    def is_consistent(self) -> bool:
        return not (self.churn_count_mismatches or self.high_value_mismatches or self.unclassified_tenure)

def _flag(condition):
    return func.sum(case((condition, 1), else_=0))

def _blank(col):
    return or_(col.is_(None), col == '')

def find_duplicate_customers(conn: Connection) -> List[DuplicateCustomer]:
    """customerID values that appear more than once."""
    query = (
        select(c.customerID, func.count().label("duplicate_count"))
        .group_by(c.customerID)
        .having(func.count() > 1)
        .order_by(c.customerID)
    )
    rows = conn.execute(query).all()
    return [DuplicateCustomer(customer_id=str(r.customerID), duplicate_count=r.duplicate_count) for r in rows]

def profile_missing_values(conn: Connection) -> MissingValueProfile:
    """NULLs or structural errors in the key columns, in one pass."""
    query = select(
        func.count().label("total_rows"),
        # Blank text casts to zero, so this also catches ' ' before cleaning
        _flag(or_(c.TotalCharges.is_(None), cast(c.TotalCharges, Numeric(10, 2)) == 0)).label("missing_total_charges"),
        _flag(c.MonthlyCharges.is_(None)).label("missing_monthly_charges"),
        _flag(_blank(c.InternetService)).label("missing_internet_service"),
        _flag(_blank(c.Contract)).label("missing_contract"),
        _flag(_blank(c.Churn)).label("missing_churn_label"),
    )
    row = conn.execute(query).mappings().one()
    # SUM over an empty table is NULL
    return MissingValueProfile(**{k: int(v or 0) for k, v in row.items()})

def profile_categorical(conn: Connection, column_name: str) -> CategoricalProfile:
    """Distinct values of a categorical column and those outside its documented domain."""
    col = c[column_name]
    values = [r[0] for r in conn.execute(select(distinct(col)).order_by(col)).all()]
    allowed = set(ChurnConfig.CATEGORICAL_DOMAINS.get(column_name, []))
    unexpected = [v for v in values if allowed and v not in allowed]
    return CategoricalProfile(column=column_name, values=values, unexpected=unexpected)

def count_null_total_charges(conn: Connection) -> int:
    return conn.execute(select(func.count()).where(c.TotalCharges.is_(None))).scalar_one()

def run_quality_checks(engine: Optional[Engine] = None) -> QualityReport:
    """Runs the duplicate, missing-value and categorical checks."""
    engine = engine or get_engine()
    try:
        with engine.connect() as conn:
            logger.info("Running data quality checks...")
            duplicates = find_duplicate_customers(conn)
            missing = profile_missing_values(conn)
            categoricals = [profile_categorical(conn, col) for col in ChurnConfig.CATEGORICAL_DOMAINS]
    except Exception as e:
        logger.error(f"Quality checks failed: {e}")
        raise

    report = QualityReport(missing=missing, duplicates=duplicates, categoricals=categoricals)

    logger.info(f"Rows: {missing.total_rows}, missing TotalCharges: {missing.missing_total_charges}")
    if duplicates:
        logger.warning(f"Found {len(duplicates)} duplicated customerIDs.")
    for profile in categoricals:
        if profile.unexpected:
            logger.warning(f"Unexpected {profile.column} values: {profile.unexpected}")
    return report

def enforce_quality(report: QualityReport, strict: Optional[bool] = None) -> None:
    """Raises on findings when strict, otherwise leaves them as logged warnings."""
    strict = settings.STRICT_QUALITY if strict is None else strict
    if strict and not report.is_clean:
        raise DataQualityError("Data quality checks failed", details=report.findings())

def assert_unique_customers(conn: Connection) -> None:
    duplicates = find_duplicate_customers(conn)
    if duplicates:
        raise DataQualityError(
            "customerID is not unique",
            details={"duplicates": {d.customer_id: d.duplicate_count for d in duplicates}},
        )

def assert_no_missing_total_charges(conn: Connection) -> None:
    remaining = count_null_total_charges(conn)
    if remaining:
        raise DataQualityError("TotalCharges still has NULL values", details={"null_rows": remaining})

def check_view_consistency(conn: Connection) -> ViewConsistency:
    """
    Counts view rows whose derived columns disagree with their sources:
    Churn_Count must be 1 exactly when Churn = 'Yes', High_Value_User 'Yes'
    exactly when MonthlyCharges exceeds the threshold, and every row needs
    a Tenure_Group.
    """
    view = table(
        ChurnConfig.VIEW_NAME,
        column("Churn"),
        column("MonthlyCharges"),
        column(ChurnConfig.TENURE_GROUP),
        column(ChurnConfig.CHURN_COUNT),
        column(ChurnConfig.HIGH_VALUE_USER),
    )
    v = view.c
    is_churned = v.Churn == 'Yes'
    is_high_value = v.MonthlyCharges > ChurnConfig.HIGH_VALUE_THRESHOLD
    query = select(
        func.count().label("total_rows"),
        _flag(or_(
            (is_churned & (v[ChurnConfig.CHURN_COUNT] != 1)),
            (~is_churned & (v[ChurnConfig.CHURN_COUNT] != 0)),
        )).label("churn_count_mismatches"),
        _flag(or_(
            (is_high_value & (v[ChurnConfig.HIGH_VALUE_USER] != 'Yes')),
            (~is_high_value & (v[ChurnConfig.HIGH_VALUE_USER] != 'No')),
        )).label("high_value_mismatches"),
        _flag(v[ChurnConfig.TENURE_GROUP].is_(None)).label("unclassified_tenure"),
    ).select_from(view)
    row = conn.execute(query).mappings().one()
    return ViewConsistency(**{k: int(val or 0) for k, val in row.items()})

def assert_view_consistent(engine: Optional[Engine] = None) -> ViewConsistency:
    engine = engine or get_engine()
    with engine.connect() as conn:
        result = check_view_consistency(conn)
    if not result.is_consistent:
        raise DataQualityError("vw_churn_data derived columns are inconsistent", details=result.model_dump())
    logger.info(f"View consistency verified over {result.total_rows} rows.")
    return result
