import threading
import time

from citizenapi.utils.locks import KeyedLock


class TestKeyedLock:
    def test_reentrant_for_same_thread(self):
        locks = KeyedLock()

        with locks.hold("user-1"):
            with locks.hold("user-1"):
                assert len(locks) == 1

        assert len(locks) == 0

    def test_same_key_is_serialized(self):
        locks = KeyedLock()
        events = []

        def worker(name):
            with locks.hold("user-1"):
                events.append(f"{name}-start")
                time.sleep(0.05)
                events.append(f"{name}-end")

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # 한 작업이 끝난 뒤 다음 작업 시작
        assert events[0].split("-")[0] == events[1].split("-")[0]
        assert events[2].split("-")[0] == events[3].split("-")[0]
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = threading.Event()

        def worker():
            with locks.hold("user-2"):
                entered.set()

        with locks.hold("user-1"):
            t = threading.Thread(target=worker)
            t.start()
            assert entered.wait(timeout=1)
            t.join()
