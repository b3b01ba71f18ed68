
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

class ChurnRecord(BaseModel):
    """
    One row of vw_churn_data: the source columns plus the derived
    dashboard columns.
    """
    # Identifiers
    customerID: str

    # Demographics
    gender: Optional[str] = None
    SeniorCitizen: Optional[int] = Field(None, ge=0, le=1)
    Partner: Optional[str] = None
    Dependents: Optional[str] = None

    # Services
    tenure: Optional[int] = None
    PhoneService: Optional[str] = None
    MultipleLines: Optional[str] = None
    InternetService: Optional[str] = None
    OnlineSecurity: Optional[str] = None
    OnlineBackup: Optional[str] = None
    DeviceProtection: Optional[str] = None
    TechSupport: Optional[str] = None
    StreamingTV: Optional[str] = None
    StreamingMovies: Optional[str] = None

    # Contract
    Contract: Optional[str] = None
    PaperlessBilling: Optional[str] = None
    PaymentMethod: Optional[str] = None

    # Financials
    MonthlyCharges: Optional[float] = None
    TotalCharges: Optional[float] = None

    # Label and derived columns
    Churn: Optional[str] = None
    Tenure_Group: Optional[str] = None
    Churn_Count: int
    High_Value_User: str

    class Config:
        json_schema_extra = {
            "example": {
                "customerID": "7590-VHVEG",
                "gender": "Female",
                "SeniorCitizen": 0,
                "Partner": "Yes",
                "Dependents": "No",
                "tenure": 1,
                "PhoneService": "No",
                "MultipleLines": "No phone service",
                "InternetService": "DSL",
                "OnlineSecurity": "No",
                "OnlineBackup": "Yes",
                "DeviceProtection": "No",
                "TechSupport": "No",
                "StreamingTV": "No",
                "StreamingMovies": "No",
                "Contract": "Month-to-month",
                "PaperlessBilling": "Yes",
                "PaymentMethod": "Electronic check",
                "MonthlyCharges": 29.85,
                "TotalCharges": 29.85,
                "Churn": "No",
                "Tenure_Group": "< 1 Year",
                "Churn_Count": 0,
                "High_Value_User": "No"
            }
        }

class AnalysisResult(BaseModel):
    name: str
    rows: List[Dict[str, Any]]

class AnalysisCatalog(BaseModel):
    analyses: List[str]

class HealthStatus(BaseModel):
    status: str
    database: bool
