"""
Benchmark suite for jmend repair performance.

Measures the repair-then-parse cycle on truncated documents, handing the
repaired text to each downstream parser:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures repair speed and memory usage across different data types.
"""
