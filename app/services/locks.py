"""
In-process mutual exclusion keyed by billboard id.

Row locks (SELECT ... FOR UPDATE) serialize writers across processes on PostgreSQL;
this lock does the same for threads of one process, which is all SQLite offers.

Billboard ids map onto a fixed pool of lock stripes, so memory stays bounded no matter
how many billboards are seen. Two billboards may share a stripe; callers never hold
more than one billboard lock at a time, so sharing only costs throughput.
"""
import threading
import zlib
from contextlib import contextmanager

STRIPES = 64

_stripes = tuple(threading.Lock() for _ in range(STRIPES))


def stripe_index(billboard_id: str) -> int:
    return zlib.crc32(billboard_id.encode("utf-8")) % STRIPES


@contextmanager
def billboard_lock(billboard_id: str):
    with _stripes[stripe_index(billboard_id)]:
        yield
