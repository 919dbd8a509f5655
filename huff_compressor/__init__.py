from huff_compressor.main import (
    BadMagicNumber,
    HuffConfig,
    HuffException,
    MalformedHeader,
    MissingCode,
    TruncatedPayload,
    compress,
    compress_bytes,
    compress_file,
    decompress,
    decompress_bytes,
    decompress_file,
)

__version__ = "0.1.0"
