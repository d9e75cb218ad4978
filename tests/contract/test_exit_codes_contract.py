from __future__ import annotations

import re
from pathlib import Path

from finsheet.cli import main as cli_main
from finsheet.logging.init import reset_logging

"""Exit code contract: 0 all usable, 2 some file failed, 1 fatal."""

HEADER = ["Date", "Description", "Amount"]


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    reset_logging()
    (temp_workdir / "config" / "ingest.yml").write_text("source_directory: 5\n", encoding="utf-8")

    code = cli_main([])

    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_all_success(temp_workdir: Path, write_config, make_excel, capsys):
    reset_logging()
    make_excel(temp_workdir / "data" / "a.xlsx", {"Q1": [HEADER, [45000, "Tea", 20]]})
    make_excel(temp_workdir / "data" / "b.xlsx", {"Q1": [HEADER, [45000, "Cake", "N/A"], [45001, "Bread", 5]]})

    code = cli_main([])

    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=2 success=2 failed=0 records=2 skipped_rows=1" in out


def test_exit_code_partial_failure(temp_workdir: Path, write_config, make_excel, capsys):
    reset_logging()
    make_excel(temp_workdir / "data" / "good.xlsx", {"Q1": [HEADER, [45000, "Tea", 20]]})
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"not excel")

    code = cli_main([])

    out = capsys.readouterr().out
    assert code == 2
    match = re.search(r"failed=(\d+)", out)
    assert match is not None, f"No 'failed=' found in output: {out}"
    assert int(match.group(1)) == 1


def test_exit_code_no_usable_rows_is_partial_failure(temp_workdir: Path, write_config, make_excel, capsys):
    reset_logging()
    make_excel(temp_workdir / "data" / "empty.xlsx", {"Q1": [HEADER]})

    code = cli_main([])

    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=1 success=0 failed=1 records=0" in out
