# tests/conftest.py
import io

import pytest

from g1_reader.reader import G1DataReader


@pytest.fixture
def read_text():
    """Run the reader over a log given as text."""

    def _read(text: str, config=None):
        return G1DataReader(io.StringIO(text), config).read()

    return _read


@pytest.fixture
def detailed_log_content():
    """G1 log with -XX:+PrintGCDetails: two young pauses, a marking cycle, a remark and a cleanup."""
    return """0.295: [GC pause (young), 0.00594747 secs]
   [Parallel Time:   5.6 ms]
      [GC Worker Start Time (ms):  295.2  295.3]
      [Update RS (ms):  0.0  0.0
       Avg:   0.0, Min:   0.0, Max:   0.0]
   [Clear CT:   0.0 ms]
   [ 4096K->3936K(16M)]
 [Times: user=0.01 sys=0.00, real=0.01 secs]
0.356: [GC pause (young) (initial-mark), 0.00219944 secs]
   [Parallel Time:   2.0 ms]
   [ 5120K->4988K(16M)]
 [Times: user=0.00 sys=0.00, real=0.00 secs]
0.358: [GC concurrent-mark-start]
0.402: [GC concurrent-mark-end, 0.0108260 sec]
0.403: [GC remark, 0.0011210 secs]
 [Times: user=0.00 sys=0.00, real=0.00 secs]
0.404: [GC cleanup 5M->5M(16M), 0.0001840 secs]
 [Times: user=0.00 sys=0.00, real=0.00 secs]
0.405: [GC concurrent-cleanup-start]
0.406: [GC concurrent-cleanup-end, 0.0000150 sec]
"""


@pytest.fixture
def heap_summary_content():
    """Heap configuration dump as printed at JVM exit."""
    return """Heap
 garbage-first heap   total 16384K, used 5412K [0x00000000, 0x01000000, 0x01000000)
  region size 1024K, 3 young (3072K), 1 survivors (1024K)
 compacting perm gen  total 20480K, used 3283K [0x01000000, 0x02400000, 0x02400000)
   the space 20480K,  16% used [0x01000000, 0x01334f40, 0x01335000, 0x02400000)
No shared spaces configured.
"""
