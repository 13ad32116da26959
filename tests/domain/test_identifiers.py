"""Identifier generation: prefixed, time-derived, unique within the process."""

import threading

from inventory_kernel.domain.identifiers import ITEM_PREFIX, TRANSACTION_PREFIX, generate_id


class TestGenerateId:

    def test_format(self):
        prefix, millis, seq, rand = generate_id(ITEM_PREFIX).split("-")
        assert prefix == "item"
        assert millis.isdigit() and len(millis) >= 13
        assert seq.isdigit()
        assert 0 <= int(rand) < 1000

    def test_transaction_prefix(self):
        assert generate_id(TRANSACTION_PREFIX).startswith("t-")

    def test_many_calls_are_distinct(self):
        ids = {generate_id(ITEM_PREFIX) for _ in range(5000)}
        assert len(ids) == 5000

    def test_distinct_across_threads(self):
        results: list[str] = []
        lock = threading.Lock()

        def worker():
            local = [generate_id(TRANSACTION_PREFIX) for _ in range(500)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == len(set(results)) == 4000
