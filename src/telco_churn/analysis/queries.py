"""
Descriptive churn analyses. Each function answers one fixed business
question with a single GROUP BY / CASE query and returns a DataFrame.
"""
from typing import Callable, Dict, Optional

import pandas as pd
from sqlalchemy import Float, case, func, select, type_coerce
from sqlalchemy.engine import Engine

from telco_churn.utils.errors import NotFoundError
from telco_churn.utils.logger import setup_logger
from telco_churn.analysis.features import ChurnConfig
from telco_churn.analysis.view import churn_view
from telco_churn.database.models import telco_churn
from telco_churn.database.init_db import get_engine

logger = setup_logger("Analysis_Queries")

c = telco_churn.c

def _churned(cols):
    return func.sum(case((cols.Churn == 'Yes', 1), else_=0))

def _rounded(expr, digits: int):
    # Float on the Python side; SQLite would otherwise hand back Decimals
    return type_coerce(func.round(expr, digits), Float)

def _churn_rate(cols):
    # * 100.0 keeps the division in floating point on SQLite
    return _rounded(_churned(cols) * 100.0 / func.count(), 1)

def _avg_charge_when(churn_value: str):
    return func.avg(case((c.Churn == churn_value, c.MonthlyCharges)))

def _read(query, engine: Optional[Engine]) -> pd.DataFrame:
    engine = engine or get_engine()
    try:
        with engine.connect() as conn:
            return pd.read_sql(query, conn)
    except Exception as e:
        logger.error(f"Analysis query failed: {e}")
        raise

def overall_churn_rate(engine: Optional[Engine] = None) -> pd.DataFrame:
    query = select(
        func.count().label("total_customers"),
        _churned(c).label("churned_customers"),
        _churn_rate(c).label("churn_rate_percent"),
    )
    return _read(query, engine)

def churn_rate_by_internet_service(engine: Optional[Engine] = None) -> pd.DataFrame:
    """Product reliability: churn rate % for Fiber optic vs DSL (vs no internet)."""
    rate = _churn_rate(c).label("churn_rate_percent")
    query = (
        select(
            c.InternetService,
            func.count().label("total_customers"),
            _churned(c).label("churned_customers"),
            rate,
        )
        .group_by(c.InternetService)
        .order_by(rate.desc(), c.InternetService)
    )
    return _read(query, engine)

def price_sensitivity_by_internet_service(engine: Optional[Engine] = None) -> pd.DataFrame:
    """
    Are churners leaving over price? Average monthly charge of churned vs
    retained customers per internet service, excluding customers without one.
    """
    churned_avg = _avg_charge_when('Yes')
    retained_avg = _avg_charge_when('No')
    query = (
        select(
            c.InternetService,
            func.count().label("total_customers"),
            _rounded(churned_avg, 2).label("avg_price_churned"),
            _rounded(retained_avg, 2).label("avg_price_retained"),
            _rounded(churned_avg - retained_avg, 2).label("price_difference"),
        )
        .where(c.InternetService != 'No')
        .group_by(c.InternetService)
        .order_by(c.InternetService)
    )
    return _read(query, engine)

def tech_support_impact(engine: Optional[Engine] = None, internet_service: str = "Fiber optic") -> pd.DataFrame:
    """Does tech support reduce churn among customers of one internet service?"""
    query = (
        select(
            c.TechSupport,
            func.count().label("total_customers"),
            _churned(c).label("churned_customers"),
            _churn_rate(c).label("churn_rate_percent"),
        )
        .where(func.lower(c.InternetService) == internet_service.lower())
        .group_by(c.TechSupport)
        .order_by(c.TechSupport)
    )
    return _read(query, engine)

def revenue_lost_by_payment_method(engine: Optional[Engine] = None, threshold: float = ChurnConfig.HIGH_VALUE_THRESHOLD) -> pd.DataFrame:
    """Revenue lost from churned high-value customers, by payment method."""
    revenue = type_coerce(func.sum(c.TotalCharges), Float).label("total_revenue_lost")
    query = (
        select(
            c.PaymentMethod,
            func.count().label("high_value_customers"),
            revenue,
        )
        .where(c.MonthlyCharges > threshold, c.Churn == 'Yes')
        .group_by(c.PaymentMethod)
        .order_by(revenue.desc())
    )
    return _read(query, engine)

def churn_rate_by_contract(engine: Optional[Engine] = None) -> pd.DataFrame:
    rate = _churn_rate(c).label("churn_rate_percent")
    query = (
        select(
            c.Contract,
            func.count().label("total_customers"),
            _churned(c).label("churned_customers"),
            rate,
        )
        .group_by(c.Contract)
        .order_by(rate.desc(), c.Contract)
    )
    return _read(query, engine)

def churn_rate_by_tenure_group(engine: Optional[Engine] = None) -> pd.DataFrame:
    """Churn by tenure bucket, read from the dashboard view, in bucket order."""
    v = churn_view().c
    group = v[ChurnConfig.TENURE_GROUP]
    bucket_order = case(
        *[(group == label, idx) for idx, label in enumerate(ChurnConfig.get_tenure_labels())],
        else_=len(ChurnConfig.TENURE_BUCKETS),
    )
    query = (
        select(
            group,
            func.count().label("total_customers"),
            func.sum(v[ChurnConfig.CHURN_COUNT]).label("churned_customers"),
            _rounded(func.sum(v[ChurnConfig.CHURN_COUNT]) * 100.0 / func.count(), 1).label("churn_rate_percent"),
        )
        .group_by(group)
        .order_by(func.min(bucket_order))
    )
    return _read(query, engine)

ANALYSES: Dict[str, Callable[..., pd.DataFrame]] = {
    "overall_churn_rate": overall_churn_rate,
    "churn_rate_by_internet_service": churn_rate_by_internet_service,
    "price_sensitivity_by_internet_service": price_sensitivity_by_internet_service,
    "tech_support_impact": tech_support_impact,
    "revenue_lost_by_payment_method": revenue_lost_by_payment_method,
    "churn_rate_by_contract": churn_rate_by_contract,
    "churn_rate_by_tenure_group": churn_rate_by_tenure_group,
}

def run_analysis(name: str, engine: Optional[Engine] = None) -> pd.DataFrame:
    if name not in ANALYSES:
        raise NotFoundError(f"Unknown analysis '{name}'")
    return ANALYSES[name](engine=engine)

def run_all_analyses(engine: Optional[Engine] = None) -> Dict[str, pd.DataFrame]:
    results = {}
    for name, analysis in ANALYSES.items():
        logger.info(f"Running analysis: {name}")
        results[name] = analysis(engine=engine)
    return results
