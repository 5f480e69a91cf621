import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, Tuple


class KeyedLock:
    """키(사용자 ID)별 재진입 가능 락

    같은 키의 작업만 직렬화하고, 사용 중인 키가 없으면 항목을 제거합니다.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # key -> (lock, 대기/보유 중인 스레드 수)
        self._locks: Dict[Hashable, Tuple[threading.RLock, int]] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.RLock()
            self._locks[key] = (lock, users + 1)

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                _, users = self._locks[key]
                if users <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# 프로세스 전역 사용자별 락 (포인트 원장 갱신 직렬화)
user_locks = KeyedLock()
