import json
from pathlib import Path

import pandas as pd
import pyarrow.parquet as pq
import pytest
from ugbio_variant_transform import transform_non_variant_segment_data
from ugbio_variant_transform.table_schema import get_table_schema
from ugbio_variant_transform.variant import Call, Variant


@pytest.fixture
def example_gvcf(tmp_path: Path):
    vcf_content = """##fileformat=VCFv4.2
##FILTER=<ID=PASS,Description="All filters passed">
##FILTER=<ID=LowQual,Description="Low quality">
##INFO=<ID=END,Number=1,Type=Integer,Description="End position of the block">
##INFO=<ID=overlapping_callsets,Number=.,Type=String,Description="Samples with records overlapping the site">
##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">
##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read depth">
##FORMAT=<ID=FT,Number=1,Type=String,Description="Sample filter">
##contig=<ID=chr1,length=248956422>
#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\tS2\tS3
chr1\t100\t.\tT\tA,C\t60\t.\t.\tGT:DP:FT\t0/1:30:PASS\t1/1:.:LowQual\t1/2:25:LowQual;PASS
chr1\t200\t.\tG\tC\t60\t.\toverlapping_callsets=S2\tGT:DP:FT\t0/0:20:PASS\t0/1:18:PASS\t./.:.:PASS
chr1\t300\t.\tA\t<NON_REF>\t.\t.\tEND=350\tGT:DP:FT\t0/0:10:LowQual\t0/0:11:PASS\t0/0:12:PASS
chr1\t400\t.\tC\tG\t60\t.\t.\tGT:DP:FT\t0/1:30:LowQual\t0/1:30:LowQual\t1/1:30:LowQual
"""
    vcf_path = tmp_path / "input.g.vcf"
    with open(vcf_path, "w") as f:
        f.write(vcf_content)
    return str(vcf_path)


def _read_rows(output_file: Path) -> list[dict]:
    with open(output_file) as f:
        return [json.loads(line) for line in f if line.strip()]


def test_transform_non_variant_segment_data(example_gvcf: str, tmp_path: Path):
    output_file = tmp_path / "rows.json"
    output_schema = tmp_path / "schema.json"
    transform_non_variant_segment_data.run(
        [
            "transform_non_variant_segment_data",
            "--input_vcf",
            example_gvcf,
            "--output_file",
            str(output_file),
            "--output_schema",
            str(output_schema),
        ]
    )
    rows = _read_rows(output_file)
    assert len(rows) == 4

    # S2 fails the filter, S3 has an ambiguous FILTER and is kept
    snp = rows[0]
    assert snp["start"] == 99
    assert [c["call_set_name"] for c in snp["call"]] == ["S1", "S3"]
    assert snp["AN"] == 4
    assert snp["alt"] == [
        {"alternate_bases": "A", "AC": 2, "AF": 0.5},
        {"alternate_bases": "C", "AC": 1, "AF": 0.25},
    ]
    assert snp["call"][0]["DP"] == 30
    assert snp["call"][1]["FILTER"] == ["LowQual", "PASS"]
    assert snp["has_ambiguous_calls"] is False

    # S2 overlaps another record at this site
    overlapping = rows[1]
    assert overlapping["has_ambiguous_calls"] is True
    assert overlapping["overlapping_callsets"] == ["S2"]
    assert overlapping["ref_match_callsets"] == ["S1"]
    assert overlapping["AN"] == 4
    assert overlapping["alt"] == [{"alternate_bases": "C", "AC": 1, "AF": 0.25}]
    assert overlapping["call"][1]["DP"] is None

    # reference blocks keep their calls regardless of FILTER
    block = rows[2]
    assert block["end"] == 350
    assert block["ref_match_callsets"] == ["S1", "S2", "S3"]
    assert block["call"] == []
    assert block["AN"] == 6

    # all calls removed, the variant is still reported
    no_calls = rows[3]
    assert no_calls["call"] == []
    assert no_calls["AN"] == 0
    assert no_calls["alt"] == [{"alternate_bases": "G", "AC": 0, "AF": 0.0}]

    with open(output_schema) as f:
        assert json.load(f) == get_table_schema()


def test_transform_with_cohorts_and_variants_only(example_gvcf: str, tmp_path: Path):
    cohorts_tsv = tmp_path / "cohorts.tsv"
    cohorts_tsv.write_text("S1\tgroupA\nS3\tgroupA\nS2\tgroupB\n")
    output_file = tmp_path / "rows.jsonl"
    transform_non_variant_segment_data.run(
        [
            "transform_non_variant_segment_data",
            "--input_vcf",
            example_gvcf,
            "--output_file",
            str(output_file),
            "--cohorts_tsv",
            str(cohorts_tsv),
            "--variants_only",
            "--keep_all_calls",
        ]
    )
    rows = _read_rows(output_file)
    # 3 variants x 3 cohorts, the reference block is skipped
    assert len(rows) == 9
    assert [r["cohort"] for r in rows[:3]] == ["", "groupA", "groupB"]
    assert all(r["start"] != 299 for r in rows)

    snp_all, snp_a, snp_b = rows[:3]
    assert snp_all["AN"] == 6
    assert snp_a["AN"] == 4
    assert [c["call_set_name"] for c in snp_a["call"]] == ["S1", "S3"]
    assert snp_b["alt"] == [
        {"alternate_bases": "A", "AC": 2, "AF": 1.0},
        {"alternate_bases": "C", "AC": 0, "AF": 0.0},
    ]

    # no calls are removed
    low_qual_all = rows[6]
    assert low_qual_all["AN"] == 6
    assert low_qual_all["alt"][0]["AC"] == 4


def test_transform_vcf_returns_row_count(example_gvcf: str, tmp_path: Path):
    options = transform_non_variant_segment_data.TransformOptions(summarize_ref_match_callsets=False)
    n_rows = transform_non_variant_segment_data.transform_vcf(example_gvcf, str(tmp_path / "rows.json"), options)
    assert n_rows == 4
    rows = _read_rows(tmp_path / "rows.json")
    assert all(r["ref_match_callsets"] == [] for r in rows)
    assert len(rows[2]["call"]) == 3


def test_unsupported_output_format(example_gvcf: str, tmp_path: Path):
    with pytest.raises(ValueError, match="Unsupported output file"):
        transform_non_variant_segment_data.transform_vcf(
            example_gvcf, str(tmp_path / "rows.csv"), transform_non_variant_segment_data.TransformOptions()
        )


def test_written_floats_keep_full_precision(tmp_path: Path):
    variant = Variant(
        reference_name="chr1",
        start=10,
        end=11,
        reference_bases="A",
        alternate_bases=["G"],
        quality=12.123456789012345,
        calls=[Call(call_set_name="s1", genotype=[0, 1]), Call(call_set_name="s2", genotype=[0])],
    )
    options = transform_non_variant_segment_data.TransformOptions(omit_low_quality_calls=False)
    rows = transform_non_variant_segment_data.transform_variant(variant, options)
    output_file = tmp_path / "rows.json"
    assert transform_non_variant_segment_data.write_rows(rows, str(output_file)) == 1

    row = _read_rows(output_file)[0]
    assert row["AN"] == 3
    assert row["alt"][0]["AF"] == 1 / 3
    assert row["quality"] == 12.123456789012345


def test_chunked_json_output(example_gvcf: str, tmp_path: Path):
    options = transform_non_variant_segment_data.TransformOptions()
    chunked_file = tmp_path / "chunked.json"
    single_file = tmp_path / "single.json"
    n_rows = transform_non_variant_segment_data.transform_vcf(example_gvcf, str(chunked_file), options, chunk_size=1)
    assert n_rows == 4
    assert transform_non_variant_segment_data.transform_vcf(example_gvcf, str(single_file), options) == 4
    assert _read_rows(chunked_file) == _read_rows(single_file)


def test_chunked_parquet_output(example_gvcf: str, tmp_path: Path):
    options = transform_non_variant_segment_data.TransformOptions()
    output_file = tmp_path / "chunked.parquet"
    n_rows = transform_non_variant_segment_data.transform_vcf(example_gvcf, str(output_file), options, chunk_size=3)
    assert n_rows == 4
    # one row group per chunk
    assert pq.ParquetFile(output_file).metadata.num_row_groups == 2
    assert pd.read_parquet(output_file)["AN"].tolist() == [4, 4, 6, 0]


def test_empty_output(tmp_path: Path):
    json_file = tmp_path / "rows.json"
    parquet_file = tmp_path / "rows.parquet"
    assert transform_non_variant_segment_data.write_rows([], str(json_file)) == 0
    assert transform_non_variant_segment_data.write_rows([], str(parquet_file)) == 0
    assert _read_rows(json_file) == []
    assert len(pd.read_parquet(parquet_file)) == 0


def test_transform_to_parquet(example_gvcf: str, tmp_path: Path):
    output_file = tmp_path / "rows.parquet"
    transform_non_variant_segment_data.run(
        [
            "transform_non_variant_segment_data",
            "--input_vcf",
            example_gvcf,
            "--output_file",
            str(output_file),
            "--verbosity",
            "DEBUG",
        ]
    )
    df_rows = pd.read_parquet(output_file)
    assert len(df_rows) == 4
    assert df_rows["AN"].tolist() == [4, 4, 6, 0]
    assert df_rows["has_ambiguous_calls"].tolist() == [False, True, False, False]

    snp_alt = list(df_rows["alt"][0])
    assert [a["alternate_bases"] for a in snp_alt] == ["A", "C"]
    assert [a["AC"] for a in snp_alt] == [2, 1]
    assert [a["AF"] for a in snp_alt] == [0.5, 0.25]

    snp_calls = list(df_rows["call"][0])
    assert [c["call_set_name"] for c in snp_calls] == ["S1", "S3"]
    assert list(snp_calls[0]["genotype"]) == [0, 1]
    assert snp_calls[0]["DP"] == 30
    assert list(df_rows["ref_match_callsets"][2]) == ["S1", "S2", "S3"]
    assert len(df_rows["call"][3]) == 0


def test_transform_with_passing_filter(example_gvcf: str, tmp_path: Path):
    output_file = tmp_path / "rows.json"
    transform_non_variant_segment_data.run(
        [
            "transform_non_variant_segment_data",
            "--input_vcf",
            example_gvcf,
            "--output_file",
            str(output_file),
            "--passing_filter",
            "LowQual",
        ]
    )
    rows = _read_rows(output_file)
    assert [c["call_set_name"] for c in rows[0]["call"]] == ["S2", "S3"]
    assert [a["AC"] for a in rows[0]["alt"]] == [3, 1]
    assert rows[1]["call"] == []
    assert rows[3]["AN"] == 6


@pytest.fixture
def unfiltered_vcf(tmp_path: Path):
    vcf_content = """##fileformat=VCFv4.2
##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">
##contig=<ID=chr2,length=242193529>
#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\tS2
chr2\t500\t.\tA\tG\t.\t.\t.\tGT\t0/1\t1/1
"""
    vcf_path = tmp_path / "unfiltered.vcf"
    with open(vcf_path, "w") as f:
        f.write(vcf_content)
    return str(vcf_path)


@pytest.mark.parametrize(
    "extra_args,expected_calls,expected_an",
    [([], [], 0), (["--keep_calls_without_filter"], ["S1", "S2"], 4)],
)
def test_keep_calls_without_filter(unfiltered_vcf: str, tmp_path: Path, extra_args, expected_calls, expected_an):
    output_file = tmp_path / "rows.json"
    transform_non_variant_segment_data.run(
        [
            "transform_non_variant_segment_data",
            "--input_vcf",
            unfiltered_vcf,
            "--output_file",
            str(output_file),
        ]
        + extra_args
    )
    row = _read_rows(output_file)[0]
    assert [c["call_set_name"] for c in row["call"]] == expected_calls
    assert row["AN"] == expected_an
