"""
Tests for the Data Splitter

Tests partition sizes, stratification and reproducibility.
"""

import pytest

from pd_scorecard.data.splitter import DataSets, split_applications


TARGET = 'everbad_in_12mo'


class TestSplitApplications:
    """Test suite for split_applications."""

    def test_sizes(self, applications):
        ds = split_applications(applications, ['sex'], target_column=TARGET)

        assert isinstance(ds, DataSets)
        assert ds.n_train == 800
        assert ds.n_test == 200

    def test_partitions_disjoint_and_complete(self, applications):
        ds = split_applications(applications, ['sex'], target_column=TARGET)

        train_ids = set(ds.train['borrower_id'])
        test_ids = set(ds.test['borrower_id'])
        assert not train_ids & test_ids
        assert train_ids | test_ids == set(applications['borrower_id'])

    def test_stratified_bad_rate(self, applications):
        ds = split_applications(applications, ['sex'], target_column=TARGET)

        overall = applications[TARGET].mean()
        assert ds.train[TARGET].mean() == pytest.approx(overall, abs=0.01)
        assert ds.test[TARGET].mean() == pytest.approx(overall, abs=0.01)

    def test_reproducible(self, applications):
        a = split_applications(applications, ['sex'], target_column=TARGET, random_state=7)
        b = split_applications(applications, ['sex'], target_column=TARGET, random_state=7)

        assert a.test['borrower_id'].tolist() == b.test['borrower_id'].tolist()

    def test_index_reset(self, applications):
        ds = split_applications(applications, ['sex'], target_column=TARGET)

        assert ds.train.index.tolist() == list(range(ds.n_train))

    def test_unstratified(self, applications):
        ds = split_applications(applications, ['sex'], target_column=TARGET, stratify=False)
        assert ds.n_test == 200
