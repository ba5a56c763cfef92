from pathlib import Path

import pytest
from ugbio_variant_transform.cohorts import default_cohorts, read_cohorts
from ugbio_variant_transform.consts import ALL_SAMPLES_COHORT


def test_default_cohorts():
    assert default_cohorts() == {ALL_SAMPLES_COHORT: set()}


def test_read_cohorts(tmp_path: Path):
    cohorts_tsv = tmp_path / "cohorts.tsv"
    cohorts_tsv.write_text("sample1\tEUR\nsample2\tAFR\nsample3\tEUR\n")
    cohorts = read_cohorts(str(cohorts_tsv))
    assert list(cohorts) == [ALL_SAMPLES_COHORT, "EUR", "AFR"]
    assert cohorts[ALL_SAMPLES_COHORT] == set()
    assert cohorts["EUR"] == {"sample1", "sample3"}
    assert cohorts["AFR"] == {"sample2"}


def test_read_cohorts_missing_cohort_name(tmp_path: Path):
    cohorts_tsv = tmp_path / "cohorts.tsv"
    cohorts_tsv.write_text("sample1\tEUR\nsample2\n")
    with pytest.raises(ValueError, match="sample2"):
        read_cohorts(str(cohorts_tsv))
