from linkfeed.services.crawl.pipeline import list_result_files, read_json_list, result_path, write_result

import json
import os
import tempfile

import pytest


def test_write_result_overwrites_previous_run():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_result(tmpdir, "hn", [{"title": "A", "company": "Acme", "url": "https://a"}])
        assert os.path.isfile(path)
        write_result(tmpdir, "hn", [])
        with open(path, "r", encoding="utf-8") as f:
            assert json.load(f) == []
        # No temp files left behind
        assert os.listdir(tmpdir) == ["hn.json"]


def test_result_path_sanitizes_source_names():
    assert result_path("results", "grimy-goods").endswith("grimy-goods.json")
    assert os.path.basename(result_path("results", "../etc/passwd")) == "etc_passwd.json"


def test_list_result_files_only_json_sorted(tmp_path):
    for name in ("b.json", "a.json", "notes.txt", ".tmp-x.json"):
        (tmp_path / name).write_text("[]", encoding="utf-8")
    (tmp_path / "dir.json").mkdir()
    assert [name for name, _ in list_result_files(str(tmp_path))] == ["a.json", "b.json"]
    assert list_result_files(str(tmp_path / "missing")) == []


def test_read_json_list_rejects_non_arrays(tmp_path):
    p = tmp_path / "x.json"
    p.write_text('{"jobs": []}', encoding="utf-8")
    with pytest.raises(ValueError):
        read_json_list(str(p))
