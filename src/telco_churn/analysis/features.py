
from typing import Dict, List, Optional, Tuple

class ChurnConfig:
    """
    Column names, categorical domains and derived-column rules for the
    telco churn dataset. Single source of truth for the table, the quality
    checks, the analyses and the dashboard view.
    """

    # --- 1. Table / View Names ---
    TABLE_NAME: str = "telco_churn"
    VIEW_NAME: str = "vw_churn_data"

    # --- 2. Source Columns (load order) ---
    COLUMNS: List[str] = [
        "customerID",
        "gender",
        "SeniorCitizen",
        "Partner",
        "Dependents",
        "tenure",
        "PhoneService",
        "MultipleLines",
        "InternetService",
        "OnlineSecurity",
        "OnlineBackup",
        "DeviceProtection",
        "TechSupport",
        "StreamingTV",
        "StreamingMovies",
        "Contract",
        "PaperlessBilling",
        "PaymentMethod",
        "MonthlyCharges",
        "TotalCharges",
        "Churn",
    ]

    INTEGER_COLUMNS: List[str] = ["SeniorCitizen", "tenure"]
    DECIMAL_COLUMNS: List[str] = ["MonthlyCharges"]

    # --- 3. Documented Categorical Domains ---
    CATEGORICAL_DOMAINS: Dict[str, List[str]] = {
        "Churn": ["Yes", "No"],
        "InternetService": ["DSL", "Fiber optic", "No"],
        "Contract": ["Month-to-month", "One year", "Two year"],
        "PaymentMethod": [
            "Electronic check",
            "Mailed check",
            "Bank transfer (automatic)",
            "Credit card (automatic)",
        ],
    }

    # --- 4. Derived View Columns ---
    TENURE_GROUP: str = "Tenure_Group"
    CHURN_COUNT: str = "Churn_Count"
    HIGH_VALUE_USER: str = "High_Value_User"

    # (label, exclusive lower bound, inclusive upper bound); None = open
    TENURE_BUCKETS: List[Tuple[str, Optional[int], Optional[int]]] = [
        ("< 1 Year", None, 12),
        ("1-2 Years", 12, 24),
        ("2-4 Years", 24, 48),
        ("> 4 Years", 48, None),
    ]

    HIGH_VALUE_THRESHOLD: float = 70.0

    @classmethod
    def get_view_columns(cls) -> List[str]:
        """Source columns followed by the derived ones, in view order."""
        return cls.COLUMNS + [cls.TENURE_GROUP, cls.CHURN_COUNT, cls.HIGH_VALUE_USER]

    @classmethod
    def get_tenure_labels(cls) -> List[str]:
        return [label for label, _, _ in cls.TENURE_BUCKETS]
