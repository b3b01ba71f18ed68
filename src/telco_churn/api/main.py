
from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Any, Dict, List
import numpy as np
import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import Engine

from telco_churn.utils.config import settings
from telco_churn.utils.errors import ChurnAnalyticsError, NotFoundError
from telco_churn.utils.logger import setup_logger
from telco_churn.database.init_db import get_engine as create_db_engine
from telco_churn.etl.quality import QualityReport, run_quality_checks
from telco_churn.analysis.queries import ANALYSES, run_analysis
from telco_churn.analysis.view import fetch_customer, fetch_view
from telco_churn.api.schemas import AnalysisCatalog, AnalysisResult, ChurnRecord, HealthStatus

logger = setup_logger("API")

# Shared database resources, populated by the lifespan handler
db_resources = {}

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Connecting to database...")
    db_resources['engine'] = create_db_engine()
    logger.info("Database engine ready.")

    yield

    # Clean up
    db_resources.pop('engine').dispose()

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

def get_engine() -> Engine:
    engine = db_resources.get('engine')
    if engine is None:
        raise HTTPException(status_code=503, detail="Database engine not initialised")
    return engine

@app.exception_handler(ChurnAnalyticsError)
async def churn_error_handler(request: Request, exc: ChurnAnalyticsError):
    logger.error(f"{request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as JSON-safe dicts (NaN -> None)."""
    return df.astype(object).replace({np.nan: None}).to_dict(orient="records")

@app.get("/health", response_model=HealthStatus)
def health_check(engine: Engine = Depends(get_engine)):
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "healthy", "database": True}
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "degraded", "database": False}

@app.get("/quality", response_model=QualityReport)
def quality_report(engine: Engine = Depends(get_engine)):
    """Current data-quality findings for the telco_churn table."""
    return run_quality_checks(engine)

@app.get("/analysis", response_model=AnalysisCatalog)
def list_analyses():
    return {"analyses": list(ANALYSES)}

@app.get("/analysis/{name}", response_model=AnalysisResult)
def get_analysis(name: str, engine: Engine = Depends(get_engine)):
    df = run_analysis(name, engine=engine)
    return {"name": name, "rows": _records(df)}

@app.get("/customers", response_model=List[ChurnRecord])
def list_customers(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    engine: Engine = Depends(get_engine),
):
    """Rows of vw_churn_data, ordered by customerID."""
    return _records(fetch_view(engine, limit=limit, offset=offset))

@app.get("/customers/{customer_id}", response_model=ChurnRecord)
def get_customer(customer_id: str, engine: Engine = Depends(get_engine)):
    record = fetch_customer(customer_id, engine=engine)
    if record is None:
        raise NotFoundError(f"Customer '{customer_id}' not found")
    return record

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("telco_churn.api.main:app", host="0.0.0.0", port=8000, reload=True)
