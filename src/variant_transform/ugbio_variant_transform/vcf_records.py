"""Conversion of pysam VCF records into Variant records."""

from __future__ import annotations

from collections.abc import Iterator

import pysam

from ugbio_variant_transform import consts
from ugbio_variant_transform.variant import Call, Variant


def _to_string_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, bool):
        return [consts.TRUE_VALUE if value else consts.FALSE_VALUE]
    if isinstance(value, tuple | list):
        return [consts.MISSING_VALUE if v is None else str(v) for v in value]
    return [str(value)]


def _sample_value(sample: pysam.VariantRecordSample, key: str):
    if key not in sample:
        return None
    value = sample[key]
    if value in (None, (None,)):
        return None
    return value


def call_from_sample(
    sample_name: str, sample: pysam.VariantRecordSample, record_filters: list[str]
) -> Call:
    """Convert the FORMAT fields of one sample into a Call

    The FILTER of the call is taken from the FT format field when present, otherwise the FILTER
    of the record applies to the call.
    """
    alleles = sample["GT"] if "GT" in sample else ()
    genotype = [consts.NO_CALL if allele is None else allele for allele in alleles]

    phaseset = ""
    phase_set_id = _sample_value(sample, "PS")
    if phase_set_id is not None:
        phaseset = str(phase_set_id)
    elif sample.phased:
        phaseset = consts.UNKNOWN_PHASESET

    genotype_likelihood = [float(x) for x in (_sample_value(sample, "GL") or ()) if x is not None]

    sample_filter = _sample_value(sample, "FT")
    if sample_filter is None:
        filters = list(record_filters)
    else:
        filters = [f for f in ";".join(_to_string_list(sample_filter)).split(";") if f]

    depth = _sample_value(sample, consts.DEPTH_FIELD)
    info = {
        consts.FILTER_FIELD: filters,
        consts.DEPTH_FIELD: [consts.MISSING_VALUE if depth is None else str(depth)],
    }
    return Call(
        call_set_name=sample_name,
        genotype=genotype,
        phaseset=phaseset,
        genotype_likelihood=genotype_likelihood,
        info=info,
    )


def variant_from_record(record: pysam.VariantRecord) -> Variant:
    """Convert a pysam record into a Variant (0-based start, exclusive end)

    Parameters
    ----------
    record : pysam.VariantRecord
        Input VCF record

    Returns
    -------
    Variant
        Variant with INFO values as string lists and one Call per sample
    """
    record_filters = list(record.filter.keys())
    info = {key: _to_string_list(value) for key, value in record.info.items()}
    calls = [call_from_sample(name, record.samples[name], record_filters) for name in record.samples]
    return Variant(
        reference_name=record.chrom,
        start=record.start,
        end=record.stop,
        reference_bases=record.ref,
        alternate_bases=list(record.alts or ()),
        names=[] if record.id is None else record.id.split(";"),
        quality=record.qual,
        filter=record_filters,
        info=info,
        calls=calls,
    )


def read_variants(input_vcf: str) -> Iterator[Variant]:
    """Iterate over the records of a VCF/gVCF file as Variants"""
    with pysam.VariantFile(input_vcf) as vcf_in:
        for record in vcf_in:
            yield variant_from_record(record)
