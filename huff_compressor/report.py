import pandas as pd

COMPRESSION_STEPS = (
    ("Count Symbols", "time_counts"),
    ("Build Tree", "time_tree_build"),
    ("Make Codes", "time_codes"),
    ("Write Header", "time_header"),
    ("Encode & Pack", "time_pack"),
    ("Total", "time_total"),
)

DECOMPRESSION_STEPS = (
    ("Read File", "time_read"),
    ("Rebuild Tree", "time_tree"),
    ("Decode", "time_decode"),
    ("Write File", "time_write"),
    ("Total", "time_total"),
)


def timings_frame(stats, steps) -> pd.DataFrame:
    # steps missing from stats show up as 0.0
    rows = [(label, float(stats.get(key) or 0.0)) for label, key in steps]
    return pd.DataFrame(rows, columns=["Step", "Time (s)"])


def compression_timings(stats) -> pd.DataFrame:
    return timings_frame(stats, COMPRESSION_STEPS)


def decompression_timings(stats) -> pd.DataFrame:
    return timings_frame(stats, DECOMPRESSION_STEPS)
