"""
Tests for the run_audit command-line script.

Reports are written with -o and read back from disk.
"""

import json

import run_audit

GOOD_PAGE = (
    '<html lang="en"><head><meta charset="utf-8"><title>Café</title></head>'
    "<body><h1>Menu</h1><p>Coffee and cake.</p></body></html>"
)


def test_audits_files_and_writes_report(tmp_path):
    page = tmp_path / "good.html"
    page.write_text(GOOD_PAGE, encoding="utf-8")
    out = tmp_path / "report.json"

    exit_code = run_audit.main([str(page), "-o", str(out)])

    assert exit_code == 0
    results = json.loads(out.read_text(encoding="utf-8"))
    assert len(results) == 1
    assert results[0]["status"] == "success"
    assert results[0]["report"]["metadata"]["title"] == "Café"


def test_failed_file_does_not_stop_the_others(tmp_path):
    bad = tmp_path / "bad.html"
    bad.write_text("<p>fragment</p>", encoding="utf-8")
    good = tmp_path / "good.html"
    good.write_text(GOOD_PAGE, encoding="utf-8")
    missing = tmp_path / "missing.html"
    out = tmp_path / "report.json"

    exit_code = run_audit.main([str(bad), str(missing), str(good), "-o", str(out)])

    assert exit_code == 1
    results = json.loads(out.read_text(encoding="utf-8"))
    assert [r["status"] for r in results] == ["error", "error", "success"]
    assert results[0]["error"]["type"] == "VALIDATION_ERROR"
    assert results[1]["error"]["error"] == "FileNotFoundError"


def test_no_validate_and_stats_flags(tmp_path):
    bad = tmp_path / "bad.html"
    bad.write_text('<p>fragment <img src="x.png"></p>', encoding="utf-8")
    out = tmp_path / "report.json"

    exit_code = run_audit.main([str(bad), "--no-validate", "--stats", "-o", str(out)])

    assert exit_code == 0
    output = json.loads(out.read_text(encoding="utf-8"))
    assert output["results"][0]["status"] == "success"
    assert output["stats"]["documents_processed"] == 1
    assert output["stats"]["elements_extracted"] == 1


def test_latin1_file_is_decoded_with_declared_charset(tmp_path):
    page = tmp_path / "latin.html"
    html = GOOD_PAGE.replace('charset="utf-8"', 'charset="iso-8859-1"')
    page.write_bytes(html.encode("latin-1"))
    out = tmp_path / "report.json"

    run_audit.main([str(page), "-o", str(out)])

    results = json.loads(out.read_text(encoding="utf-8"))
    assert results[0]["report"]["metadata"]["title"] == "Café"


def test_report_on_stdout_is_clean_json(tmp_path, capsys):
    page = tmp_path / "good.html"
    page.write_text(GOOD_PAGE, encoding="utf-8")

    exit_code = run_audit.main([str(page)])

    assert exit_code == 0
    results = json.loads(capsys.readouterr().out)
    assert results[0]["status"] == "success"
