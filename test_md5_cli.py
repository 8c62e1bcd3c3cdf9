import hashlib

import pytest

from md5_cli import check_vectors, hash_file, load_vectors, main


def test_hashes_message_argument(capsys):
    assert main(["abc"]) == 0
    assert capsys.readouterr().out == "900150983cd24fb0d6963f7d28e17f72\n"


def test_hashes_empty_message(capsys):
    assert main([""]) == 0
    assert capsys.readouterr().out.strip() == "d41d8cd98f00b204e9800998ecf8427e"


@pytest.mark.parametrize("chunk_size", ["1", "63", "64", "4096"])
def test_hashes_file_in_chunks(tmp_path, capsys, chunk_size):
    data = bytes(range(256)) * 5
    path = tmp_path / "input.bin"
    path.write_bytes(data)

    assert main(["-f", str(path), "--chunk-size", chunk_size]) == 0
    assert capsys.readouterr().out.strip() == hashlib.md5(data).hexdigest()


def test_missing_file_reports_error(tmp_path, capsys):
    missing = tmp_path / "nope.bin"
    assert main(["-f", str(missing)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error reading file" in captured.err


def test_rejects_non_positive_chunk_size(tmp_path, capsys):
    path = tmp_path / "input.bin"
    path.write_bytes(b"abc")
    assert main(["-f", str(path), "--chunk-size", "0"]) == 1
    assert "--chunk-size" in capsys.readouterr().err


def test_hash_file_rejects_non_positive_chunk_size(tmp_path):
    path = tmp_path / "input.bin"
    path.write_bytes(b"abc")
    with pytest.raises(ValueError):
        hash_file(path, 0)


def test_requires_a_mode(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().err.lower()


def test_check_default_vectors(capsys):
    assert main(["--check"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 7
    assert all(line.endswith(": success") for line in lines)
    assert lines[2] == "abc = 900150983cd24fb0d6963f7d28e17f72 : success"


def test_check_reports_failed_vector(tmp_path, capsys):
    path = tmp_path / "vectors.yaml"
    path.write_text(
        "vectors:\n"
        "  - input: abc\n"
        "    digest: 900150983cd24fb0d6963f7d28e17f72\n"
        "  - input: abd\n"
        "    digest: 900150983cd24fb0d6963f7d28e17f72\n",
        encoding="utf-8",
    )
    assert main(["--check", str(path)]) == 1
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].endswith(": success")
    assert lines[1].startswith("abd = ")
    assert lines[1].endswith(": failed")


def test_check_with_malformed_vectors(tmp_path, capsys):
    path = tmp_path / "vectors.yaml"
    path.write_text("vectors:\n  - input: abc\n", encoding="utf-8")
    assert main(["--check", str(path)]) == 1
    assert "Error loading vectors" in capsys.readouterr().err


@pytest.mark.parametrize(
    "document",
    [
        "[]\n",
        "vectors: 3\n",
        "vectors:\n  - abc\n",
        "vectors:\n  - digest: 900150983cd24fb0d6963f7d28e17f72\n",
        "vectors:\n  - input: abc\n    digest: 9001\n",
    ],
)
def test_load_vectors_validates_schema(tmp_path, document):
    path = tmp_path / "vectors.yaml"
    path.write_text(document, encoding="utf-8")
    with pytest.raises(ValueError):
        load_vectors(path)


def test_load_vectors_normalizes_case(tmp_path):
    path = tmp_path / "vectors.yaml"
    path.write_text(
        "vectors:\n  - input: abc\n    digest: 900150983CD24FB0D6963F7D28E17F72\n",
        encoding="utf-8",
    )
    vectors = load_vectors(path)
    assert vectors == [{"input": "abc", "digest": "900150983cd24fb0d6963f7d28e17f72"}]
    assert check_vectors(vectors)
