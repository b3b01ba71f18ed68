
from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table
from sqlalchemy.types import TypeEngine

from telco_churn.analysis.features import ChurnConfig

# DECIMAL(10, 2); floats on the Python side so SQLite does not warn about Decimal
CHARGE_TYPE = Numeric(10, 2, asdecimal=False)
RAW_TOTAL_CHARGES_TYPE = String(50)

metadata = MetaData()

def build_churn_table(name: str, metadata: MetaData, total_charges_type: TypeEngine = RAW_TOTAL_CHARGES_TYPE) -> Table:
    """
    Builds the 21-column churn table definition.

    No primary key: customerID uniqueness is asserted
    by a quality check so that duplicate rows can be loaded and reported.
    TotalCharges arrives as text and is switched to a decimal during cleaning.
    """
    return Table(
        name,
        metadata,
        Column("customerID", String(50)),
        Column("gender", String(20)),
        Column("SeniorCitizen", Integer),
        Column("Partner", String(5)),
        Column("Dependents", String(5)),
        Column("tenure", Integer),
        Column("PhoneService", String(5)),
        Column("MultipleLines", String(20)),
        Column("InternetService", String(20)),
        Column("OnlineSecurity", String(20)),
        Column("OnlineBackup", String(20)),
        Column("DeviceProtection", String(20)),
        Column("TechSupport", String(20)),
        Column("StreamingTV", String(20)),
        Column("StreamingMovies", String(20)),
        Column("Contract", String(20)),
        Column("PaperlessBilling", String(5)),
        Column("PaymentMethod", String(50)),
        Column("MonthlyCharges", CHARGE_TYPE),
        Column("TotalCharges", total_charges_type),
        Column("Churn", String(5)),
    )

telco_churn = build_churn_table(ChurnConfig.TABLE_NAME, metadata)
