from __future__ import annotations

from collections import defaultdict

import pandas as pd

from ugbio_variant_transform.consts import ALL_SAMPLES_COHORT
from ugbio_variant_transform.logger import logger


def default_cohorts() -> dict[str, set[str]]:
    """Only the all-samples cohort (empty name, no sample restriction)"""
    return {ALL_SAMPLES_COHORT: set()}


def read_cohorts(cohorts_tsv: str) -> dict[str, set[str]]:
    """Read cohort definitions in addition to the all-samples cohort

    Parameters
    ----------
    cohorts_tsv : str
        Headerless TAB separated file, columns: sample name, cohort name

    Returns
    -------
    dict[str, set[str]]
        Cohort name to sample names, the all-samples cohort first

    Raises
    ------
    ValueError
        If a line has no cohort name
    """
    df_cohorts = pd.read_csv(cohorts_tsv, sep="\t", header=None, names=["sample", "cohort"], dtype=str)
    df_cohorts["sample"] = df_cohorts["sample"].str.strip()
    df_cohorts["cohort"] = df_cohorts["cohort"].str.strip()
    missing = df_cohorts["cohort"].isna() | (df_cohorts["cohort"] == ALL_SAMPLES_COHORT)
    if missing.any():
        raise ValueError(
            f"{cohorts_tsv}: no cohort name for sample(s) {', '.join(df_cohorts.loc[missing, 'sample'].astype(str))}"
        )

    cohorts = defaultdict(set)
    for sample, cohort in zip(df_cohorts["sample"], df_cohorts["cohort"], strict=True):
        cohorts[cohort].add(sample)

    result = default_cohorts()
    result.update(cohorts)
    logger.info(f"Read {len(cohorts)} cohorts from {cohorts_tsv}: {', '.join(sorted(cohorts))}")
    return result
