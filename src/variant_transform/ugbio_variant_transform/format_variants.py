"""Format variants into flat table rows with allele statistics and per-call records."""

from __future__ import annotations

from ugbio_variant_transform import consts
from ugbio_variant_transform.variant import Call, Variant


def count_alleles(calls: list[Call], n_alternates: int) -> tuple[list[int], int]:
    """Count alternate alleles over the genotypes of the calls

    Parameters
    ----------
    calls : list[Call]
        Calls to count
    n_alternates : int
        Number of alternate alleles of the variant

    Returns
    -------
    tuple[list[int], int]
        Allele count (AC) of each alternate allele (index 0 is the first alternate) and the
        allele number (AN), the number of non-missing genotype entries
    """
    allele_counts = [0] * n_alternates
    allele_number = 0
    for call in calls:
        for allele in call.genotype:
            if allele == consts.NO_CALL:
                continue
            allele_number += 1
            if 1 <= allele <= n_alternates:
                allele_counts[allele - 1] += 1
    return allele_counts, allele_number


def allele_frequency(allele_count: int, allele_number: int) -> float:
    if allele_number == 0:
        return 0.0
    return allele_count / allele_number


def is_ref_match(call: Call) -> bool:
    """True if all genotype entries of the call are reference"""
    return len(call.genotype) > 0 and all(allele == 0 for allele in call.genotype)


def parse_depth(call: Call) -> int | None:
    """Read depth of the call, None when missing or "."

    Raises
    ------
    ValueError
        If the depth is neither an integer nor the missing value
    """
    values = call.info.get(consts.DEPTH_FIELD, [])
    if len(values) == 0 or values[0] == consts.MISSING_VALUE:
        return None
    return int(values[0])


def format_call(call: Call) -> dict:
    return {
        consts.CALL_SET_NAME: call.call_set_name,
        consts.PHASESET: call.phaseset,
        consts.GENOTYPE: list(call.genotype),
        consts.GENOTYPE_LIKELIHOOD: list(call.genotype_likelihood),
        consts.FILTER_FIELD: list(call.info.get(consts.FILTER_FIELD, [])),
        consts.DEPTH_FIELD: parse_depth(call),
    }


def cohort_calls(variant: Variant, samples: set[str]) -> list[Call]:
    """Calls of the variant that belong to the cohort, an empty sample set selects all calls"""
    if len(samples) == 0:
        return list(variant.calls)
    return [call for call in variant.calls if call.call_set_name in samples]


def _has_ambiguous_calls_value(variant: Variant) -> bool | None:
    values = variant.info.get(consts.HAS_AMBIGUOUS_CALLS_FIELD, [])
    if len(values) == 0:
        return None
    return values[0] == consts.TRUE_VALUE


def format_variant(
    variant: Variant,
    cohorts: dict[str, set[str]],
    *,
    summarize_ref_match_callsets: bool = True,
    variants_only: bool = False,
) -> list[dict]:
    """Convert a (filtered and flagged) variant into one output row per cohort

    Parameters
    ----------
    variant : Variant
        Input record
    cohorts : dict[str, set[str]]
        Cohort name to sample names, an empty set means all samples
    summarize_ref_match_callsets : bool, optional
        Report reference-matching calls by name only (ref_match_callsets) instead of as call rows
    variants_only : bool, optional
        Emit no rows for non-variant segments

    Returns
    -------
    list[dict]
        Output rows, in the order of the cohorts
    """
    if variants_only and variant.is_non_variant_segment():
        return []

    rows = []
    for cohort_name, samples in cohorts.items():
        calls = cohort_calls(variant, samples)
        allele_counts, allele_number = count_alleles(calls, len(variant.alternate_bases))

        alt = [
            {
                consts.ALTERNATE_BASES: alternate_bases,
                consts.ALLELE_COUNT_FIELD: allele_count,
                consts.ALLELE_FREQUENCY_FIELD: allele_frequency(allele_count, allele_number),
            }
            for alternate_bases, allele_count in zip(variant.alternate_bases, allele_counts, strict=True)
        ]

        ref_match_callsets = []
        call_rows = []
        for call in calls:
            if summarize_ref_match_callsets and is_ref_match(call):
                ref_match_callsets.append(call.call_set_name)
            else:
                call_rows.append(format_call(call))

        rows.append(
            {
                consts.REFERENCE_NAME: variant.reference_name,
                consts.START: variant.start,
                consts.END: variant.end,
                consts.REFERENCE_BASES: variant.reference_bases,
                consts.NAMES: list(variant.names),
                consts.QUALITY: variant.quality,
                consts.FILTER: list(variant.filter),
                consts.ALT: alt,
                consts.CALL: call_rows,
                consts.ALLELE_NUMBER_FIELD: allele_number,
                consts.HAS_AMBIGUOUS_CALLS_FIELD: _has_ambiguous_calls_value(variant),
                consts.REF_MATCH_CALLSETS_FIELD: ref_match_callsets,
                consts.OVERLAPPING_CALLSETS_FIELD: list(variant.info.get(consts.OVERLAPPING_CALLSETS_FIELD, [])),
                consts.COHORT: cohort_name,
            }
        )
    return rows
