import gzip
import io
import json
from pathlib import Path

from covreduce.utils import open_text_input, write_json


def test_open_text_input_plain_gzip_and_stdin(tmp_path: Path, monkeypatch):
    plain = tmp_path / "a.pileup"
    plain.write_text("chr1\t1\tA\t3\n", encoding="utf-8")
    packed = tmp_path / "a.pileup.gz"
    with gzip.open(packed, "wt") as fh:
        fh.write("chr1\t1\tA\t3\n")

    for path in (plain, packed):
        with open_text_input(path) as fh:
            assert fh.read() == "chr1\t1\tA\t3\n"

    stdin = io.StringIO("chr1\t2\tC\t4\n")
    monkeypatch.setattr("sys.stdin", stdin)
    with open_text_input("-") as fh:
        assert fh.read() == "chr1\t2\tC\t4\n"
    assert not stdin.closed


def test_write_json_sorted_with_trailing_newline(tmp_path: Path):
    out = tmp_path / "summary.json"
    write_json(out, {"b": 1, "a": [2]})
    text = out.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert text.index('"a"') < text.index('"b"')
    assert json.loads(text) == {"a": [2], "b": 1}
