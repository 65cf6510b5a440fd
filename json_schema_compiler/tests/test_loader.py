import io
import json

import pytest

from json_schema_compiler.errors import DecodeError, FileAccessError
from json_schema_compiler.loader import load_documents


def test_load_files_in_order(tmp_path):
    first = tmp_path / "a.json"
    second = tmp_path / "b.json"
    first.write_text(json.dumps({"title": "A"}), encoding="utf-8")
    second.write_text(json.dumps({"title": "B"}), encoding="utf-8")

    documents = load_documents([str(second), str(first)])
    assert [d.uri for d in documents] == [str(second), str(first)]
    assert documents[0].schema == {"title": "B"}


def test_load_stdin():
    documents = load_documents(["-"], stdin=io.StringIO('{"$id": "urn:person", "type": "string"}'))
    assert documents[0].uri == "-"
    assert documents[0].id == "urn:person"


def test_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{'title': 1}", encoding="utf-8")
    with pytest.raises(DecodeError, match="bad.json is not valid JSON: Expecting property name"):
        load_documents([str(path)])


def test_missing_file(tmp_path):
    with pytest.raises(FileAccessError, match="cannot read .*missing.json"):
        load_documents([str(tmp_path / "missing.json")])
