from enum import Enum


class OutputFormat(Enum):
    """Supported extensions of the row output file"""

    JSON = ".json"
    JSONL = ".jsonl"
    PARQUET = ".parquet"


# filtering
FILTER_FIELD = "FILTER"
PASSING_FILTER = "PASS"
GATK_NON_VARIANT_SEGMENT_ALT = "<NON_REF>"

# per-call fields
CALL_SET_NAME = "call_set_name"
PHASESET = "phaseset"
GENOTYPE = "genotype"
GENOTYPE_LIKELIHOOD = "genotype_likelihood"
DEPTH_FIELD = "DP"
MISSING_VALUE = "."
NO_CALL = -1
UNKNOWN_PHASESET = "*"

# variant level annotations
HAS_AMBIGUOUS_CALLS_FIELD = "has_ambiguous_calls"
OVERLAPPING_CALLSETS_FIELD = "overlapping_callsets"
REF_MATCH_CALLSETS_FIELD = "ref_match_callsets"
TRUE_VALUE = "true"
FALSE_VALUE = "false"

# allele statistics
ALTERNATE_BASES = "alternate_bases"
ALLELE_COUNT_FIELD = "AC"
ALLELE_FREQUENCY_FIELD = "AF"
ALLELE_NUMBER_FIELD = "AN"

# output row
REFERENCE_NAME = "reference_name"
START = "start"
END = "end"
REFERENCE_BASES = "reference_bases"
NAMES = "names"
QUALITY = "quality"
FILTER = "filter"
ALT = "alt"
CALL = "call"
COHORT = "cohort"

# cohorts, the default cohort has an empty name and no sample restriction
ALL_SAMPLES_COHORT = ""
