"""
Benchmark suite for jmapper.

Compares typed and generic mapping against decoding with standard JSON
libraries followed by building the same objects by hand:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)
"""
