"""
Tests for Exploratory Default-Rate Tables
"""

import numpy as np
import pandas as pd

from pd_scorecard.data.exploration import default_rate_table, summarize_variables


TARGET = 'everbad_in_12mo'


class TestDefaultRateTable:
    """Test suite for default_rate_table."""

    def test_categorical_levels(self, applications):
        table = default_rate_table(applications, 'civil_status', TARGET)

        assert list(table.columns) == ['Level', 'Count', 'Bads', 'Bad_Rate', 'Share']
        assert set(table['Level']) == set(applications['civil_status'])
        assert table['Count'].sum() == len(applications)
        assert table['Bads'].sum() == applications[TARGET].sum()

    def test_numeric_bands_with_missing(self, applications):
        table = default_rate_table(applications, 'monthly_income', TARGET, n_bands=5)

        assert 'Missing' in table['Level'].tolist()
        assert len(table) == 6
        assert table['Count'].sum() == len(applications)

    def test_bad_rate(self):
        df = pd.DataFrame({'g': ['a', 'a', 'b', 'b'], 'y': [1, 0, 0, 0]})
        table = default_rate_table(df, 'g', 'y').set_index('Level')

        assert table.loc['a', 'Bad_Rate'] == 0.5
        assert table.loc['b', 'Bad_Rate'] == 0.0


class TestSummarizeVariables:
    """Test suite for summarize_variables."""

    def test_one_row_per_variable(self, applications):
        summary = summarize_variables(applications, ['sex', 'monthly_income'], TARGET)

        assert summary['Variable'].tolist() == ['sex', 'monthly_income']
        assert summary.loc[0, 'Type'] == 'categorical'
        assert summary.loc[1, 'Type'] == 'numeric'
        assert summary.loc[1, 'Missing_Rate'] > 0
        assert np.isnan(summary.loc[0, 'Min'])
