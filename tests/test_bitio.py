import io

from huff_compressor.bitio import BitInputStream, BitOutputStream, open_input, open_output


def test_write_pads_final_byte_with_zeros():
    out = io.BytesIO()
    w = BitOutputStream(out)
    w.write_bits(3, 0b101)
    w.write_bits(9, 256)
    w.close()
    assert out.getvalue() == b"\xb0\x00"
    assert w.bits_written == 12
    assert w.pad_count == 4


def test_write_keeps_only_low_bits():
    out = io.BytesIO()
    w = BitOutputStream(out)
    w.write_bits(4, 0x1F)
    w.write_bits(4, 0)
    w.close()
    assert out.getvalue() == b"\xf0"
    assert w.pad_count == 0


def test_close_twice_writes_once():
    out = io.BytesIO()
    w = BitOutputStream(out)
    w.write_bits(1, 1)
    w.close()
    w.close()
    assert out.getvalue() == b"\x80"


def test_read_bits_msb_first_then_end_marker():
    r = BitInputStream(io.BytesIO(b"\xb0\x00"))
    assert r.read_bits(3) == 0b101
    assert r.read_bits(9) == 256
    assert r.read_bits(4) == 0
    assert r.read_bits(1) == -1
    assert r.bits_read == 16


def test_read_past_end_returns_minus_one():
    r = BitInputStream(io.BytesIO(b"\x01"))
    assert r.read_bits(9) == -1
    assert BitInputStream(io.BytesIO(b"")).read_bits(1) == -1


def test_reset_rewinds_to_start():
    r = BitInputStream(io.BytesIO(b"\x12\x34"))
    assert r.read_bits(8) == 0x12
    assert r.read_bits(4) == 0x3
    r.reset()
    assert r.bits_read == 0
    assert r.read_bits(16) == 0x1234


def test_reset_returns_to_initial_offset():
    f = io.BytesIO(b"\xaa\xbb")
    f.read(1)
    r = BitInputStream(f)
    assert r.read_bits(8) == 0xBB
    r.reset()
    assert r.read_bits(8) == 0xBB


def test_large_write_round_trips_through_files(tmp_path):
    path = str(tmp_path / "bits.bin")
    with open_output(path) as w:
        for i in range(10000):
            w.write_bits(9, i % 512)
    with open_input(path) as r:
        values = [r.read_bits(9) for _ in range(10000)]
    assert values == [i % 512 for i in range(10000)]
