"""
Shared fixtures: a small Telco-shaped CSV and throwaway SQLite databases
at each pipeline stage (loaded, cleaned, with the dashboard view).

Run with: pytest -v
"""

import pandas as pd
import pytest
from sqlalchemy import create_engine

from telco_churn.analysis.features import ChurnConfig
from telco_churn.analysis.view import create_view
from telco_churn.database.init_db import init_db
from telco_churn.etl.cleaning import clean_table
from telco_churn.etl.ingest import load_raw_data, push_to_db

# (customerID, tenure, InternetService, TechSupport, Contract, PaymentMethod, MonthlyCharges, TotalCharges, Churn)
SAMPLE_ROWS = [
    ("C001", 1, "DSL", "No", "Month-to-month", "Electronic check", 29.85, "29.85", "No"),
    ("C002", 34, "DSL", "Yes", "One year", "Mailed check", 56.95, "1889.5", "No"),
    ("C003", 2, "DSL", "No", "Month-to-month", "Mailed check", 53.85, "108.15", "Yes"),
    ("C004", 45, "Fiber optic", "Yes", "One year", "Bank transfer (automatic)", 80.00, "3600.0", "No"),
    ("C005", 8, "Fiber optic", "No", "Month-to-month", "Electronic check", 99.65, "820.5", "Yes"),
    ("C006", 22, "Fiber optic", "No", "Month-to-month", "Electronic check", 89.10, "1949.4", "Yes"),
    # New customer: nothing billed yet, TotalCharges is a blank string
    ("C007", 0, "No", "No internet service", "Two year", "Mailed check", 20.25, " ", "No"),
    ("C008", 62, "Fiber optic", "Yes", "Two year", "Credit card (automatic)", 104.80, "6500.0", "Yes"),
    # Exactly on the high-value threshold
    ("C009", 13, "Fiber optic", "No", "Month-to-month", "Credit card (automatic)", 70.00, "910.0", "Yes"),
]


def make_frame(rows=SAMPLE_ROWS) -> pd.DataFrame:
    records = []
    for cid, tenure, internet, support, contract, payment, monthly, total, churn in rows:
        no_internet = internet == "No"
        addon = "No internet service" if no_internet else "No"
        records.append({
            "customerID": cid,
            "gender": "Female",
            "SeniorCitizen": 0,
            "Partner": "Yes",
            "Dependents": "No",
            "tenure": tenure,
            "PhoneService": "Yes",
            "MultipleLines": "No",
            "InternetService": internet,
            "OnlineSecurity": addon,
            "OnlineBackup": addon,
            "DeviceProtection": addon,
            "TechSupport": support,
            "StreamingTV": addon,
            "StreamingMovies": addon,
            "Contract": contract,
            "PaperlessBilling": "Yes",
            "PaymentMethod": payment,
            "MonthlyCharges": monthly,
            "TotalCharges": total,
            "Churn": churn,
        })
    return pd.DataFrame(records, columns=ChurnConfig.COLUMNS)


@pytest.fixture
def write_csv(tmp_path):
    """Writes a frame to a CSV inside tmp_path and returns the path."""
    def _write(frame: pd.DataFrame, name: str = "telco.csv") -> str:
        path = tmp_path / name
        frame.to_csv(path, index=False)
        return str(path)
    return _write


@pytest.fixture
def sample_csv(write_csv):
    return write_csv(make_frame())


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(f"sqlite:///{tmp_path / 'telco_customer.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def loaded_engine(engine, sample_csv):
    push_to_db(load_raw_data(sample_csv), engine)
    return engine


@pytest.fixture
def cleaned_engine(loaded_engine):
    clean_table(loaded_engine)
    return loaded_engine


@pytest.fixture
def view_engine(cleaned_engine):
    create_view(cleaned_engine)
    return cleaned_engine
