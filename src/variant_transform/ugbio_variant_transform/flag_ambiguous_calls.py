"""Flag variants where a sample is represented by more than one record at the site."""

from __future__ import annotations

from ugbio_variant_transform.consts import (
    FALSE_VALUE,
    HAS_AMBIGUOUS_CALLS_FIELD,
    OVERLAPPING_CALLSETS_FIELD,
    TRUE_VALUE,
)
from ugbio_variant_transform.variant import Variant

HAS_AMBIGUOUS_CALLS_INFO = {HAS_AMBIGUOUS_CALLS_FIELD: [TRUE_VALUE]}
NO_AMBIGUOUS_CALLS_INFO = {HAS_AMBIGUOUS_CALLS_FIELD: [FALSE_VALUE]}


def has_ambiguous_calls(variant: Variant) -> bool:
    """A variant is ambiguous if one of its call sets also appears in the overlapping call sets
    of the site, or if the same call set has more than one call in the variant"""
    call_set_names = [call.call_set_name for call in variant.calls]
    if len(set(call_set_names)) != len(call_set_names):
        return True
    overlapping = variant.info.get(OVERLAPPING_CALLSETS_FIELD, [])
    return any(name in call_set_names for name in overlapping)


def flag_variant_with_ambiguous_calls(variant: Variant) -> Variant:
    """Set the has_ambiguous_calls annotation ("true"/"false"), replacing an existing one"""
    value = TRUE_VALUE if has_ambiguous_calls(variant) else FALSE_VALUE
    return variant.with_info(HAS_AMBIGUOUS_CALLS_FIELD, [value])
