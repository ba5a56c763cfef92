"""Remove non-passing calls from variant records. Reference blocks are kept as is."""

from __future__ import annotations

from ugbio_variant_transform.consts import FILTER_FIELD, PASSING_FILTER
from ugbio_variant_transform.logger import logger
from ugbio_variant_transform.variant import Call, Variant


def call_passes_filter(
    call: Call, passing_filter: str = PASSING_FILTER, *, keep_calls_without_filter: bool = False
) -> bool:
    """Check whether a call passes the quality filter

    Parameters
    ----------
    call : Call
        Input call
    passing_filter : str, optional
        Passing filter value, matched exactly (default: PASS)
    keep_calls_without_filter : bool, optional
        Whether calls with an empty or missing FILTER annotation pass

    Returns
    -------
    bool
        True if the FILTER list contains the passing value. Lists that hold both passing and
        failing values are ambiguous and pass.
    """
    filters = call.info.get(FILTER_FIELD, [])
    if len(filters) == 0:
        return keep_calls_without_filter
    return passing_filter in filters


def filter_calls(
    variant: Variant,
    is_variant: bool | None = None,
    passing_filter: str = PASSING_FILTER,
    *,
    keep_calls_without_filter: bool = False,
) -> Variant:
    """Keep only the passing calls of a true variant

    Parameters
    ----------
    variant : Variant
        Input record
    is_variant : bool, optional
        Whether the record is a true variant. Computed from the alternate bases if not given
    passing_filter : str, optional
        Passing filter value (default: PASS)
    keep_calls_without_filter : bool, optional
        Retain calls that carry no FILTER annotation

    Returns
    -------
    Variant
        The record with the retained calls in their original order. Non-variant segments are
        returned unchanged. A variant that lost all of its calls is still returned.
    """
    if is_variant is None:
        is_variant = not variant.is_non_variant_segment()
    if not is_variant:
        return variant

    calls = [
        call
        for call in variant.calls
        if call_passes_filter(call, passing_filter, keep_calls_without_filter=keep_calls_without_filter)
    ]
    if len(calls) == 0 and len(variant.calls) > 0:
        logger.debug(f"All calls were filtered at {variant.reference_name}:{variant.start}")
    return variant.with_calls(calls)
