import re
import time
from concurrent.futures import ThreadPoolExecutor

from mapepire.codec import IdAllocator


def _split(request_id):
    prefix, _, number = request_id.partition("-")
    return prefix, int(number)


def test_ids_are_unique_within_one_allocator():
    alloc = IdAllocator()
    ids = [alloc.next() for _ in range(10_000)]
    assert len(set(ids)) == 10_000


def test_two_allocators_have_distinct_prefixes():
    a = IdAllocator()
    time.sleep(0.02)
    b = IdAllocator()
    assert _split(a.next())[0] != _split(b.next())[0]


def test_next_increments():
    alloc = IdAllocator()
    _, an = _split(alloc.next())
    _, bn = _split(alloc.next())
    assert bn == an + 1


def test_first_id_starts_at_zero_with_hex_prefix():
    alloc = IdAllocator()
    first = alloc.next()
    assert re.fullmatch(r"[0-9a-f]{12}-0", first)
    assert first.startswith(alloc.prefix() + "-")


def test_unique_across_threads():
    alloc = IdAllocator()

    def batch(_):
        return [alloc.next() for _ in range(1000)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        batches = list(pool.map(batch, range(8)))

    all_ids = [request_id for ids in batches for request_id in ids]
    numbers = sorted(_split(request_id)[1] for request_id in all_ids)
    assert len(set(all_ids)) == 8000
    assert numbers == list(range(8000))