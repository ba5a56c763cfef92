"""Variant and call records flowing through the transformation stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ugbio_variant_transform.consts import GATK_NON_VARIANT_SEGMENT_ALT


@dataclass(frozen=True)
class Call:
    """Genotype call of a single sample (call set) at a site

    Attributes
    ----------
    call_set_name : str
        Name of the sample
    genotype : list[int]
        Allele indices, -1 is a no-call, 0 the reference and i >= 1 the i-th alternate allele
    phaseset : str
        Phase set of the genotype, empty if unphased
    genotype_likelihood : list[float]
        Genotype likelihoods
    info : dict[str, list[str]]
        Per-call annotations (e.g. FILTER, DP)
    """

    call_set_name: str = ""
    genotype: list[int] = field(default_factory=list)
    phaseset: str = ""
    genotype_likelihood: list[float] = field(default_factory=list)
    info: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Variant:
    """Variant or non-variant segment (reference block) record

    Coordinates are 0-based, half open.
    """

    reference_name: str = ""
    start: int = 0
    end: int = 0
    reference_bases: str = ""
    alternate_bases: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    quality: float | None = None
    filter: list[str] = field(default_factory=list)
    info: dict[str, list[str]] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)

    def is_non_variant_segment(self) -> bool:
        """True for reference blocks: no alternate bases or only the GATK <NON_REF> allele"""
        return len(self.alternate_bases) == 0 or (
            len(self.alternate_bases) == 1 and self.alternate_bases[0] == GATK_NON_VARIANT_SEGMENT_ALT
        )

    def with_calls(self, calls: list[Call]) -> Variant:
        return replace(self, calls=list(calls))

    def with_info(self, key: str, values: list[str]) -> Variant:
        """Copy of the variant where info[key] is replaced by values"""
        info = dict(self.info)
        info[key] = list(values)
        return replace(self, info=info)
