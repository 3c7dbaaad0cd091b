"""
Tests for the Application Data Loader

Tests file reading, schema checks and value coercion.
"""

import numpy as np
import pandas as pd
import pytest

from pd_scorecard.config.schema import DataConfig
from pd_scorecard.core.exceptions import DataValidationError, SchemaValidationError
from pd_scorecard.data.loader import load_applications, read_table, validate_applications


class TestReadTable:
    """Test suite for read_table."""

    def test_reads_csv(self, applications, applications_csv):
        df = read_table(str(applications_csv))

        assert len(df) == len(applications)
        assert list(df.columns) == list(applications.columns)

    def test_reads_semicolon_delimited(self, applications, tmp_path):
        path = tmp_path / "apps.txt"
        applications.head(50).to_csv(path, sep=';', index=False)

        df = read_table(str(path))

        assert df.shape == (50, applications.shape[1])

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataValidationError, match="not found"):
            read_table(str(tmp_path / "nope.csv"))


class TestValidateApplications:
    """Test suite for validate_applications."""

    def test_valid_frame_is_coerced(self, applications):
        df = validate_applications(applications, DataConfig())

        assert df['everbad_in_12mo'].dtype == int
        assert df['age_at_application'].dtype == float
        assert df['sex'].dtype == object
        # Missing incomes are kept as NaN
        assert df['monthly_income'].isna().sum() == applications['monthly_income'].isna().sum()

    def test_input_not_modified(self, applications):
        before = applications['age_at_application'].dtype
        validate_applications(applications, DataConfig())
        assert applications['age_at_application'].dtype == before

    def test_missing_columns(self, applications):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_applications(applications.drop(columns=['sex']), DataConfig())

        assert exc_info.value.missing_columns == ['sex']

    def test_bad_label_values(self, applications):
        df = applications.copy()
        df.loc[0, 'everbad_in_12mo'] = 2

        with pytest.raises(DataValidationError) as exc_info:
            validate_applications(df, DataConfig())

        assert exc_info.value.validation_errors[0]['column'] == 'everbad_in_12mo'

    def test_missing_label(self, applications):
        df = applications.copy()
        df['everbad_in_12mo'] = df['everbad_in_12mo'].astype(float)
        df.loc[3, 'everbad_in_12mo'] = np.nan

        with pytest.raises(DataValidationError):
            validate_applications(df, DataConfig())

    def test_duplicate_ids(self, applications):
        df = applications.copy()
        df.loc[1, 'borrower_id'] = df.loc[0, 'borrower_id']

        with pytest.raises(DataValidationError) as exc_info:
            validate_applications(df, DataConfig())

        assert '1 duplicate ids' in exc_info.value.validation_errors[0]['error']

    def test_non_numeric_values(self, applications):
        df = applications.copy()
        df['nominal_rate'] = df['nominal_rate'].astype(object)
        df.loc[0, 'nominal_rate'] = 'twelve percent'

        with pytest.raises(DataValidationError) as exc_info:
            validate_applications(df, DataConfig())

        assert exc_info.value.validation_errors[0]['column'] == 'nominal_rate'

    def test_categorical_missing_preserved(self, applications):
        df = applications.copy()
        df['civil_status'] = df['civil_status'].astype(object)
        df.loc[0, 'civil_status'] = np.nan

        result = validate_applications(df, DataConfig())

        assert pd.isna(result.loc[0, 'civil_status'])
        assert result.loc[1, 'civil_status'] == applications.loc[1, 'civil_status']


class TestLoadApplications:
    """Test suite for load_applications."""

    def test_load_with_override_path(self, applications_csv):
        df = load_applications(DataConfig(), input_path=str(applications_csv))
        assert len(df) == 1000

    def test_load_from_config_path(self, applications_csv):
        df = load_applications(DataConfig(input_path=str(applications_csv)))
        assert 'everbad_in_12mo' in df.columns
