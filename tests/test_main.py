import json
import logging
import sys

import pytest

from hadal.__main__ import main


@pytest.fixture(autouse=True)
def workdir(monkeypatch, tmp_path):
    monkeypatch.setenv("HADAL_WORKDIR", str(tmp_path))
    monkeypatch.delenv("HADAL_LOCALE", raising=False)
    monkeypatch.delenv("HADAL_LOG_FILE", raising=False)
    yield tmp_path
    # main() installs file handlers on the root logger
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.FileHandler, logging.StreamHandler):
            handler.close()
            root.removeHandler(handler)


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["hadal", *args])
    main()


def test_text_answer_as_json(monkeypatch, capsys):
    run_main(
        monkeypatch,
        "--prompt=What is your name?",
        "--answer=My name is Amina and I am from Hargeisa.",
        "--duration=35",
        "--json",
    )
    payload = json.loads(capsys.readouterr().out)
    assert payload["passed"] is True
    assert payload["overallScore"] == 73
    assert payload["analysisMethod"] == "primary"


def test_text_answer_is_logged_per_user(monkeypatch, capsys, workdir):
    for _ in range(2):
        run_main(
            monkeypatch,
            "--prompt=What is your name?",
            "--answer=um uh I don't know",
            "--duration=31",
            "--locale=en",
            "--user=u1",
            "--question=q1",
        )
    output = capsys.readouterr().out
    assert "NOT PASSED" in output
    assert "missed this question" in output
    assert (workdir / "attempts.jsonl").exists()


@pytest.mark.parametrize("args", [
    ["--prompt=Q?", "--answer=hi", "--level=9"],
    ["--prompt=Q?", "--live", "--level=7"],
    ["--prompt=Q?", "--answer=hi", "--level=two"],
    ["--prompt=Q?", "--answer=hi", "--duration=long"],
    ["--prompt=Q?", "--answer=hi", "--locale=fr"],
    ["--prompt=Q?", "--answer=hi", "--bogus"],
    ["--answer=hi"],
])
def test_bad_arguments_exit_with_1(monkeypatch, args):
    with pytest.raises(SystemExit) as info:
        run_main(monkeypatch, *args)
    assert info.value.code == 1


def test_help(monkeypatch, capsys):
    run_main(monkeypatch, "--help")
    assert "Usage" in capsys.readouterr().out
