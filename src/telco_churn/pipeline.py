
from typing import Dict, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict
from sqlalchemy.engine import Engine

from telco_churn.utils.config import settings
from telco_churn.utils.logger import setup_logger
from telco_churn.database.init_db import get_engine, init_db
from telco_churn.etl.ingest import load_raw_data, push_to_db
from telco_churn.etl.quality import QualityReport, ViewConsistency, assert_view_consistent, enforce_quality, run_quality_checks
from telco_churn.etl.cleaning import CleaningSummary, clean_table
from telco_churn.analysis.view import create_view
from telco_churn.analysis.queries import run_all_analyses

logger = setup_logger("Pipeline")

class PipelineResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    rows_loaded: int
    quality: QualityReport
    cleaning: CleaningSummary
    view: ViewConsistency
    analyses: Dict[str, pd.DataFrame]

def run_pipeline(csv_path: Optional[str] = None, engine: Optional[Engine] = None) -> PipelineResult:
    """
    Load -> quality checks -> cleaning -> dashboard view -> analyses.
    Every step is also runnable on its own; this only sequences them.
    """
    csv_path = csv_path or settings.RAW_DATA_PATH
    engine = engine or get_engine()

    # 1. Table
    init_db(engine, reset=settings.RESET_ON_LOAD)

    # 2. Load
    raw = load_raw_data(csv_path)
    rows = push_to_db(raw, engine)

    # 3. Quality checks on the raw load
    quality = run_quality_checks(engine)
    enforce_quality(quality)

    # 4. Cleaning
    cleaning = clean_table(engine)

    # 5. Dashboard view
    create_view(engine)
    view = assert_view_consistent(engine)

    # 6. Analyses
    analyses = run_all_analyses(engine)
    for name, frame in analyses.items():
        logger.info(f"--- {name} ---\n{frame.to_string(index=False)}")

    return PipelineResult(rows_loaded=rows, quality=quality, cleaning=cleaning, view=view, analyses=analyses)

def main():
    try:
        run_pipeline()
        logger.info("Pipeline complete.")
    except Exception as e:
        logger.error(f"Pipeline Failed: {e}")
        raise

if __name__ == "__main__":
    main()
