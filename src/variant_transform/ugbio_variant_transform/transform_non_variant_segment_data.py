#!/env/python

# Copyright 2024 Ultima Genomics Inc.
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.
# DESCRIPTION
#    Transform variant and non-variant segment (gVCF) records into flat table rows:
#    filter calls, flag variants with ambiguous calls and compute allele statistics per cohort
# CHANGELOG in reverse chronological order

from __future__ import annotations

import argparse
import itertools
import json
import logging
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

import pyarrow as pa
import pyarrow.parquet as pq
import tqdm.auto as tqdm

from ugbio_variant_transform.cohorts import default_cohorts, read_cohorts
from ugbio_variant_transform.consts import PASSING_FILTER, OutputFormat
from ugbio_variant_transform.filter_calls import filter_calls
from ugbio_variant_transform.flag_ambiguous_calls import flag_variant_with_ambiguous_calls
from ugbio_variant_transform.format_variants import format_variant
from ugbio_variant_transform.logger import logger
from ugbio_variant_transform.table_schema import get_arrow_schema, get_column_names, write_table_schema
from ugbio_variant_transform.variant import Variant
from ugbio_variant_transform.vcf_records import read_variants

DEFAULT_CHUNK_SIZE = 100_000


@dataclass
class TransformOptions:
    """Configuration of the transformation

    Attributes
    ----------
    omit_low_quality_calls : bool
        Remove calls that do not pass the filter from true variants
    keep_calls_without_filter : bool
        Calls without a FILTER annotation pass the call filter
    passing_filter : str
        FILTER value of passing calls
    summarize_ref_match_callsets : bool
        Report reference-matching calls by sample name only
    variants_only : bool
        Do not output rows for non-variant segments
    cohorts : dict[str, set[str]]
        Cohort name to sample names, always includes the all-samples cohort
    """

    omit_low_quality_calls: bool = True
    keep_calls_without_filter: bool = False
    passing_filter: str = PASSING_FILTER
    summarize_ref_match_callsets: bool = True
    variants_only: bool = False
    cohorts: dict[str, set[str]] = field(default_factory=default_cohorts)


def transform_variant(variant: Variant, options: TransformOptions) -> list[dict]:
    """Filter calls, flag ambiguous calls and format a single record into output rows"""
    if options.omit_low_quality_calls:
        variant = filter_calls(
            variant,
            passing_filter=options.passing_filter,
            keep_calls_without_filter=options.keep_calls_without_filter,
        )
    variant = flag_variant_with_ambiguous_calls(variant)
    return format_variant(
        variant,
        options.cohorts,
        summarize_ref_match_callsets=options.summarize_ref_match_callsets,
        variants_only=options.variants_only,
    )


def transform_variants(variants: Iterable[Variant], options: TransformOptions) -> Iterator[dict]:
    for variant in variants:
        yield from transform_variant(variant, options)


def _output_format(output_file: str) -> OutputFormat:
    for output_format in OutputFormat:
        if output_file.endswith(output_format.value):
            return output_format
    raise ValueError(
        f"Unsupported output file {output_file}, extension should be one of {[f.value for f in OutputFormat]}"
    )


class RowWriter:
    """Append rows in chunks to newline delimited JSON or parquet, according to the extension of output_file"""

    def __init__(self, output_file: str):
        self.output_format = _output_format(output_file)
        self.output_file = output_file
        self.n_rows = 0
        if self.output_format == OutputFormat.PARQUET:
            self._schema = get_arrow_schema()
            self._writer = pq.ParquetWriter(output_file, self._schema)
        else:
            self._writer = open(output_file, "w")  # noqa: SIM115

    def write(self, rows: list[dict]) -> None:
        if len(rows) == 0:
            return
        if self.output_format == OutputFormat.PARQUET:
            self._writer.write_table(pa.Table.from_pylist(rows, schema=self._schema))
        else:
            # json writes the shortest repr of floats, so AF = AC/AN reads back exactly
            columns = get_column_names()
            self._writer.writelines(json.dumps({c: row[c] for c in columns}) + "\n" for row in rows)
        self.n_rows += len(rows)

    def close(self) -> None:
        self._writer.close()

    def __enter__(self) -> RowWriter:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def write_rows(rows: Iterable[dict], output_file: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Write rows in chunks of chunk_size, return the number of rows written"""
    rows = iter(rows)
    with RowWriter(output_file) as writer:
        while chunk := list(itertools.islice(rows, chunk_size)):
            writer.write(chunk)
    return writer.n_rows


def transform_vcf(
    input_vcf: str,
    output_file: str,
    options: TransformOptions,
    output_schema: str | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Transform all records of a VCF/gVCF file into table rows

    Parameters
    ----------
    input_vcf : str
        Input VCF file
    output_file : str
        Output file (.json/.jsonl - newline delimited JSON, .parquet)
    options : TransformOptions
        Transformation options
    output_schema : str, optional
        If set, the table schema is written to this file as JSON
    chunk_size : int, optional
        Number of rows held in memory before they are appended to the output

    Returns
    -------
    int
        Number of rows written
    """
    _output_format(output_file)
    logger.info(f"Processing {input_vcf} and writing to {output_file}")
    rows = transform_variants(tqdm.tqdm(read_variants(input_vcf), desc="records"), options)
    n_rows = write_rows(rows, output_file, chunk_size=chunk_size)
    logger.info(f"Wrote {n_rows} rows for {len(options.cohorts)} cohort(s) to {output_file}")

    if output_schema is not None:
        write_table_schema(output_schema)
        logger.info(f"Table schema written to: {output_schema}")
    return n_rows


def parse_args(argv: list[str]) -> argparse.Namespace:
    ap_var = argparse.ArgumentParser(
        prog="transform_non_variant_segment_data.py",
        description="Filter calls, flag ambiguous calls and compute allele statistics of gVCF records",
    )
    ap_var.add_argument("--input_vcf", help="Input VCF/gVCF file", type=str, required=True)
    ap_var.add_argument(
        "--output_file", help="Output rows file (.json/.jsonl or .parquet)", type=str, required=True
    )
    ap_var.add_argument(
        "--output_schema", help="Output JSON file with the table schema", type=str, required=False, default=None
    )
    ap_var.add_argument(
        "--cohorts_tsv",
        help="TAB separated file of sample name and cohort name, rows are generated per cohort "
        "in addition to the all-samples cohort",
        type=str,
        required=False,
        default=None,
    )
    ap_var.add_argument(
        "--keep_all_calls",
        help="Do not remove calls that do not pass the filter",
        required=False,
        default=False,
        action="store_true",
    )
    ap_var.add_argument(
        "--keep_calls_without_filter",
        help="Calls with no FILTER value are considered passing",
        required=False,
        default=False,
        action="store_true",
    )
    ap_var.add_argument(
        "--passing_filter", help="FILTER value of passing calls", type=str, required=False, default=PASSING_FILTER
    )
    ap_var.add_argument(
        "--no_summarize_ref_match_callsets",
        help="Output reference-matching calls as call records instead of listing their sample names",
        required=False,
        default=False,
        action="store_true",
    )
    ap_var.add_argument(
        "--variants_only",
        help="Do not output non-variant segments",
        required=False,
        default=False,
        action="store_true",
    )
    ap_var.add_argument(
        "--verbosity",
        help="Verbosity: ERROR, WARNING, INFO, DEBUG",
        required=False,
        default="INFO",
    )
    return ap_var.parse_args(argv)


def run(argv: list[str]):
    """Run function"""
    args = parse_args(argv[1:])
    logger.setLevel(getattr(logging, args.verbosity))
    logger.debug(args)

    options = TransformOptions(
        omit_low_quality_calls=not args.keep_all_calls,
        keep_calls_without_filter=args.keep_calls_without_filter,
        passing_filter=args.passing_filter,
        summarize_ref_match_callsets=not args.no_summarize_ref_match_callsets,
        variants_only=args.variants_only,
        cohorts=default_cohorts() if args.cohorts_tsv is None else read_cohorts(args.cohorts_tsv),
    )
    transform_vcf(args.input_vcf, args.output_file, options, output_schema=args.output_schema)
    return 0


def main():
    run(sys.argv)


if __name__ == "__main__":
    main()
