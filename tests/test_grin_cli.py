import os
import sys
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import grin


def _sample(tmp_path, data):
	src = tmp_path / "sample.txt"
	src.write_bytes(data)
	return src


def test_encode_then_decode(tmp_path):
	data = b"grin grin grin, a small static huffman compressor\n" * 20
	src = _sample(tmp_path, data)
	packed = tmp_path / "sample.grin"
	restored = tmp_path / "sample.out"

	assert grin.main(["encode", str(src), str(packed)]) == 0
	assert grin.main(["decode", str(packed), str(restored)]) == 0
	assert restored.read_bytes() == data


def test_verbose_prints_summary(tmp_path, capsys):
	src = _sample(tmp_path, b"aaaaabbbc")
	packed = tmp_path / "sample.grin"

	assert grin.main(["-v", "encode", str(src), str(packed)]) == 0
	out = capsys.readouterr().out
	assert out.startswith("encode: 9 bytes")
	assert "ratio" in out


def test_bad_magic_exits_with_error(tmp_path, capsys):
	bad = tmp_path / "bad.grin"
	bad.write_bytes(b"GRIN, but not really")
	out = tmp_path / "out"

	assert grin.main(["decode", str(bad), str(out)]) == 1
	assert "bad magic number" in capsys.readouterr().err
	assert not out.exists()


def test_missing_input_exits_with_error(tmp_path, capsys):
	assert grin.main(["encode", str(tmp_path / "missing"), str(tmp_path / "x.grin")]) == 1
	assert capsys.readouterr().err.startswith("grin: error:")


def test_truncated_stream_warns(tmp_path, capsys):
	data = b"This is a test" * 100
	src = _sample(tmp_path, data)
	packed = tmp_path / "sample.grin"
	restored = tmp_path / "sample.out"
	grin.main(["encode", str(src), str(packed)])
	packed.write_bytes(packed.read_bytes()[:-3])

	assert grin.main(["decode", str(packed), str(restored)]) == 0
	assert "warning" in capsys.readouterr().err
	assert data.startswith(restored.read_bytes())


@pytest.mark.parametrize("argv", [
	[],
	["compress", "a", "b"],
	["encode", "only-one"],
])
def test_usage_errors(argv, capsys):
	with pytest.raises(SystemExit) as excinfo:
		grin.main(argv)
	assert excinfo.value.code == 2
	assert "usage: grin" in capsys.readouterr().err
