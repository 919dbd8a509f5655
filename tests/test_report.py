from huff_compressor.main import compress_file
from huff_compressor.report import compression_timings, decompression_timings


def test_compression_timings_table(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(b"some text to time " * 20)
    _, stats = compress_file(str(src), str(tmp_path / "in.huff"))

    df = compression_timings(stats)
    assert list(df.columns) == ["Step", "Time (s)"]
    assert list(df["Step"]) == ["Count Symbols", "Build Tree", "Make Codes",
                                "Write Header", "Encode & Pack", "Total"]
    assert df.iloc[-1]["Time (s)"] == stats["time_total"]


def test_missing_timings_default_to_zero():
    df = decompression_timings({"time_decode": 0.5})
    assert len(df) == 5
    assert df.set_index("Step")["Time (s)"].to_dict() == {
        "Read File": 0.0,
        "Rebuild Tree": 0.0,
        "Decode": 0.5,
        "Write File": 0.0,
        "Total": 0.0,
    }
