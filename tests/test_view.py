"""
vw_churn_data: derived Tenure_Group, Churn_Count and High_Value_User columns.
"""

import pytest
from sqlalchemy.dialects import mysql, sqlite

from telco_churn.analysis.features import ChurnConfig
from telco_churn.analysis.view import compile_view_ddl, create_view, fetch_customer, fetch_view
from telco_churn.etl.cleaning import clean_table
from telco_churn.etl.ingest import load_raw_data, push_to_db
from telco_churn.etl.quality import assert_view_consistent, check_view_consistency
from telco_churn.utils.errors import DataQualityError

from conftest import SAMPLE_ROWS, make_frame

EXPECTED_TENURE_GROUPS = {
    "C001": "< 1 Year",
    "C002": "2-4 Years",
    "C003": "< 1 Year",
    "C004": "2-4 Years",
    "C005": "< 1 Year",
    "C006": "1-2 Years",
    "C007": "< 1 Year",
    "C008": "> 4 Years",
    "C009": "1-2 Years",
}


class TestViewColumns:
    """Shape and derived values of the view."""

    def test_columns_are_source_plus_derived(self, view_engine):
        df = fetch_view(view_engine)
        assert list(df.columns) == ChurnConfig.get_view_columns()
        assert len(df) == 9

    def test_churn_count_matches_label(self, view_engine):
        df = fetch_view(view_engine)
        assert ((df["Churn"] == "Yes").astype(int) == df["Churn_Count"]).all()
        assert df["Churn_Count"].sum() == 5

    def test_high_value_flag(self, view_engine):
        df = fetch_view(view_engine).set_index("customerID")
        assert sorted(df.index[df["High_Value_User"] == "Yes"]) == ["C004", "C005", "C006", "C008"]
        # Threshold is strict
        assert df.loc["C009", "High_Value_User"] == "No"

    def test_tenure_groups(self, view_engine):
        df = fetch_view(view_engine)
        assert dict(zip(df["customerID"], df["Tenure_Group"])) == EXPECTED_TENURE_GROUPS
        assert df["Tenure_Group"].notna().all()

    def test_cleaned_total_charges_visible(self, view_engine):
        record = fetch_customer("C007", engine=view_engine)
        assert float(record["TotalCharges"]) == 0.0
        assert record["Tenure_Group"] == "< 1 Year"
        assert record["Churn_Count"] == 0


class TestConsistency:
    """Derived columns agree with their sources."""

    def test_view_is_consistent(self, view_engine):
        result = assert_view_consistent(view_engine)
        assert result.total_rows == 9
        assert result.is_consistent

    def test_null_tenure_is_unclassified(self, engine, write_csv):
        frame = make_frame()
        frame["tenure"] = frame["tenure"].astype(object)
        frame.loc[4, "tenure"] = ""
        push_to_db(load_raw_data(write_csv(frame)), engine)
        clean_table(engine)
        create_view(engine)

        with engine.connect() as conn:
            assert check_view_consistency(conn).unclassified_tenure == 1
        with pytest.raises(DataQualityError):
            assert_view_consistent(engine)


class TestAccessors:
    """Read-only access to the view."""

    def test_fetch_view_paging(self, view_engine):
        first = fetch_view(view_engine, limit=2)
        assert list(first["customerID"]) == ["C001", "C002"]
        page = fetch_view(view_engine, limit=3, offset=7)
        assert list(page["customerID"]) == ["C008", "C009"]

    def test_fetch_unknown_customer(self, view_engine):
        assert fetch_customer("NOPE", engine=view_engine) is None

    def test_create_view_twice(self, view_engine):
        create_view(view_engine)
        assert len(fetch_view(view_engine)) == 9


def _view_for(engine, write_csv, frame):
    push_to_db(load_raw_data(write_csv(frame)), engine)
    clean_table(engine)
    create_view(engine)
    return fetch_view(engine).set_index("customerID")


@pytest.mark.parametrize("tenure, label", [
    (0, "< 1 Year"),
    (12, "< 1 Year"),
    (13, "1-2 Years"),
    (24, "1-2 Years"),
    (25, "2-4 Years"),
    (48, "2-4 Years"),
    (49, "> 4 Years"),
    (72, "> 4 Years"),
])
def test_tenure_bucket_edges(engine, write_csv, tenure, label):
    frame = make_frame(SAMPLE_ROWS[:1])
    frame.loc[0, "tenure"] = tenure
    df = _view_for(engine, write_csv, frame)
    assert df.loc["C001", "Tenure_Group"] == label


def test_every_tenure_gets_one_bucket(engine, write_csv):
    rows = [(f"T{t:03d}",) + SAMPLE_ROWS[0][1:] for t in range(0, 100)]
    frame = make_frame(rows)
    frame["tenure"] = list(range(0, 100))
    df = _view_for(engine, write_csv, frame)
    assert len(df) == 100
    assert df["Tenure_Group"].notna().all()
    assert set(df["Tenure_Group"]) == set(ChurnConfig.get_tenure_labels())


def test_sub_cent_charge_is_not_high_value(engine, write_csv):
    """Charges are stored at DECIMAL(10, 2), so 70.004 is 70.00 and not above the threshold."""
    frame = make_frame(SAMPLE_ROWS[:1])
    frame["MonthlyCharges"] = frame["MonthlyCharges"].astype(object)
    frame.loc[0, "MonthlyCharges"] = "70.004"
    df = _view_for(engine, write_csv, frame)
    assert df.loc["C001", "High_Value_User"] == "No"


@pytest.mark.parametrize("dialect", [sqlite.dialect(), mysql.dialect()])
def test_view_ddl_compiles(dialect):
    ddl = compile_view_ddl(dialect)
    assert ddl.startswith("CREATE VIEW vw_churn_data AS SELECT")
    assert "'2-4 Years'" in ddl
    assert "70" in ddl
