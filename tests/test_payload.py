import pytest

from crashreport.config import GITHUB_BODY_LIMIT, TRUNCATION_MARKER
from crashreport.utils.payload import build_payload, issue_title, split

MARKER = len(TRUNCATION_MARKER)


def test_large_inputs_are_split_evenly():
    overhead = "h" * 300
    raw, summary = split("r" * 100000, "s" * 100000, 65536, overhead)

    assert len(raw) == 32618
    assert len(summary) == 32618
    assert raw == "r" * (32618 - MARKER) + TRUNCATION_MARKER
    assert summary.endswith(TRUNCATION_MARKER)
    assert len(overhead) + len(raw) + len(summary) <= 65536


def test_short_inputs_are_untouched():
    assert split("raw", "summary", 1000, "x" * 10) == ("raw", "summary")


def test_remainder_goes_to_summary():
    assert split("a" * 5, "b" * 6, 11, "") == ("a" * 5, "b" * 6)
    raw, summary = split("a" * 6, "b" * 6, 11, "")
    assert raw == ""
    assert summary == "b" * 6


def test_overhead_larger_than_budget():
    assert split("raw" * 1000, "sum" * 1000, 100, "x" * 500) == ("", "")


def test_share_smaller_than_marker_is_empty():
    raw, summary = split("a" * 100, "b" * 100, MARKER + 2, "")
    assert raw == ""
    assert summary == ""


def test_none_inputs():
    assert split(None, None, 100, "") == ("", "")


@pytest.mark.parametrize("raw_len", [0, 1, 1000, 32759, 32760, 65536, 250000])
@pytest.mark.parametrize("summary_len", [0, 40000, 250000])
def test_body_never_exceeds_limit(raw_len, summary_len):
    payload = build_payload("r" * raw_len, "s" * summary_len, "AcreetionOS-Linux")
    assert len(payload.body) <= GITHUB_BODY_LIMIT


def test_body_layout():
    payload = build_payload("REPORT", "SUMMARY", "maintainer")
    assert payload.body == (
        "@maintainer\n\n## System Information\n```\nREPORT"
        "\n```\n\n## AI Generated Summary\nSUMMARY\n"
    )
    assert payload.header == "@maintainer\n\n## System Information\n```\n"
    assert payload.tail == "\n"
    assert len(payload) == len(payload.body)


def test_issue_title():
    assert issue_title("box") == "Automated Bug Report: System Errors Detected on box"
    assert issue_title("") == "Automated Bug Report: System Errors Detected on (unknown)"


def _utf8(text):
    return len(text.encode("utf-8"))


def test_multibyte_body_fits_byte_limit():
    payload = build_payload("● cups.service - CUPS\n" * 10000, "● summary\n" * 10000, "AcreetionOS-Linux")
    assert _utf8(payload.body) <= GITHUB_BODY_LIMIT
    assert len(payload) == _utf8(payload.body)
    assert payload.system_part.endswith(TRUNCATION_MARKER)
    assert payload.ai_part.endswith(TRUNCATION_MARKER)


def test_split_shares_are_byte_budgets():
    raw, summary = split("é" * 100, "ü" * 100, 100 + 300, "x" * 300)
    assert _utf8(raw) <= 50
    assert _utf8(summary) <= 50
    assert raw.endswith(TRUNCATION_MARKER)
    assert set(raw[:-MARKER]) == {"é"}


def test_overhead_measured_in_bytes():
    # 50 个三字节字符占满 150 字节预算
    assert split("raw", "sum", 150, "●" * 50) == ("", "")
