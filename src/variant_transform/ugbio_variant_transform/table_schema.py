"""Schema of the output table, in BigQuery JSON schema format."""

from __future__ import annotations

import json

import pyarrow as pa

from ugbio_variant_transform import consts

# (name, type, mode, description)
ALT_FIELDS: list[tuple[str, str, str, str]] = [
    (consts.ALTERNATE_BASES, "STRING", "NULLABLE", "Alternate allele"),
    (consts.ALLELE_COUNT_FIELD, "INTEGER", "NULLABLE", "Allele count of this alternate in the cohort"),
    (consts.ALLELE_FREQUENCY_FIELD, "FLOAT", "NULLABLE", "Allele frequency of this alternate in the cohort"),
]

CALL_FIELDS: list[tuple[str, str, str, str]] = [
    (consts.CALL_SET_NAME, "STRING", "NULLABLE", "Name of the sample"),
    (consts.PHASESET, "STRING", "NULLABLE", "Phase set of the genotype, '*' if phased with no set"),
    (consts.GENOTYPE, "INTEGER", "REPEATED", "Allele indices, -1 is a no-call"),
    (consts.GENOTYPE_LIKELIHOOD, "FLOAT", "REPEATED", "Genotype likelihoods"),
    (consts.FILTER_FIELD, "STRING", "REPEATED", "Filters of the call"),
    (consts.DEPTH_FIELD, "INTEGER", "NULLABLE", "Read depth, null if missing"),
]

VARIANT_FIELDS: list[tuple[str, str, str, str]] = [
    (consts.REFERENCE_NAME, "STRING", "REQUIRED", "Contig name"),
    (consts.START, "INTEGER", "REQUIRED", "0-based start position"),
    (consts.END, "INTEGER", "REQUIRED", "0-based exclusive end position"),
    (consts.REFERENCE_BASES, "STRING", "NULLABLE", "Reference bases"),
    (consts.NAMES, "STRING", "REPEATED", "Variant identifiers"),
    (consts.QUALITY, "FLOAT", "NULLABLE", "Phred-scaled quality"),
    (consts.FILTER, "STRING", "REPEATED", "Filters of the variant"),
    (consts.ALT, "RECORD", "REPEATED", "Alternate alleles with their statistics"),
    (consts.CALL, "RECORD", "REPEATED", "Calls of the cohort"),
    (consts.ALLELE_NUMBER_FIELD, "INTEGER", "NULLABLE", "Number of called alleles in the cohort"),
    (consts.HAS_AMBIGUOUS_CALLS_FIELD, "BOOLEAN", "NULLABLE", "A sample has more than one record at this site"),
    (consts.REF_MATCH_CALLSETS_FIELD, "STRING", "REPEATED", "Samples with homozygous reference genotype"),
    (consts.OVERLAPPING_CALLSETS_FIELD, "STRING", "REPEATED", "Samples with records overlapping this site"),
    (consts.COHORT, "STRING", "NULLABLE", "Cohort of the row, empty for all samples"),
]

NESTED_FIELDS = {consts.ALT: ALT_FIELDS, consts.CALL: CALL_FIELDS}


def _to_schema_field(name: str, field_type: str, mode: str, description: str) -> dict:
    schema_field = {"name": name, "type": field_type, "mode": mode, "description": description}
    if field_type == "RECORD":
        schema_field["fields"] = [_to_schema_field(*nested) for nested in NESTED_FIELDS[name]]
    return schema_field


def get_table_schema() -> list[dict]:
    """Output table schema, one entry per row field"""
    return [_to_schema_field(*f) for f in VARIANT_FIELDS]


def get_column_names() -> list[str]:
    return [f[0] for f in VARIANT_FIELDS]


def write_table_schema(output_file: str) -> None:
    """Write the schema as JSON (e.g. for bq load --schema)"""
    with open(output_file, "w") as f:
        json.dump(get_table_schema(), f, indent=2)


ARROW_TYPES = {"STRING": pa.string(), "INTEGER": pa.int64(), "FLOAT": pa.float64(), "BOOLEAN": pa.bool_()}


def _to_arrow_field(name: str, field_type: str, mode: str, description: str) -> pa.Field:
    if field_type == "RECORD":
        arrow_type = pa.struct([_to_arrow_field(*nested) for nested in NESTED_FIELDS[name]])
    else:
        arrow_type = ARROW_TYPES[field_type]
    if mode == "REPEATED":
        arrow_type = pa.list_(arrow_type)
    return pa.field(name, arrow_type, nullable=mode != "REQUIRED", metadata={"description": description})


def get_arrow_schema() -> pa.Schema:
    """Output table schema for parquet, so all row chunks share the same column types"""
    return pa.schema([_to_arrow_field(*f) for f in VARIANT_FIELDS])
