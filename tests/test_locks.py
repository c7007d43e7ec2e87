import threading

import pytest

from xvkit.locks import LockError, SleepLock, SpinLock


def _in_thread(fn):
    results = []

    def run():
        try:
            results.append(("ok", fn()))
        except Exception as exc:  # noqa: BLE001
            results.append(("err", exc))

    t = threading.Thread(target=run)
    t.start()
    t.join(5)
    return results[0]


def test_spinlock_holding_tracks_acquire_release():
    lock = SpinLock("test")
    assert lock.holding() is False
    lock.acquire()
    assert lock.holding() is True
    assert lock.locked is True
    lock.release()
    assert lock.holding() is False
    assert lock.locked is False


def test_spinlock_reacquire_raises():
    lock = SpinLock("test")
    lock.acquire()
    with pytest.raises(LockError):
        lock.acquire()
    lock.release()


def test_spinlock_release_unheld_raises():
    with pytest.raises(LockError):
        SpinLock("test").release()


def test_spinlock_foreign_thread_not_holding():
    lock = SpinLock("test")
    lock.acquire()
    kind, value = _in_thread(lock.holding)
    assert (kind, value) == ("ok", False)
    kind, value = _in_thread(lock.release)
    assert kind == "err" and isinstance(value, LockError)
    lock.release()


def test_spinlock_excludes_other_threads():
    lock = SpinLock("test")
    entered = threading.Event()
    held_inside = []

    def worker():
        with lock:
            held_inside.append(lock.holding())
            entered.set()

    lock.acquire()
    assert lock.holding() is True
    t = threading.Thread(target=worker)
    t.start()
    assert entered.wait(0.1) is False
    assert lock.holding() is True
    lock.release()
    t.join(5)
    assert entered.is_set()
    assert held_inside == [True]
    assert lock.holding() is False
    assert lock.locked is False


def test_spinlock_context_manager_counts():
    lock = SpinLock("counter")
    total = [0]

    def worker():
        for _ in range(1000):
            with lock:
                total[0] += 1

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)
    assert total[0] == 4 * 1000
    assert lock.locked is False


def test_sleeplock_holding():
    lock = SleepLock("sleep")
    assert lock.holding() is False
    with lock:
        assert lock.holding() is True
        assert lock.pid == threading.get_ident()
        assert _in_thread(lock.holding) == ("ok", False)
    assert lock.holding() is False
    assert lock.pid == 0


def test_sleeplock_blocks_until_release():
    lock = SleepLock("sleep")
    entered = threading.Event()

    def worker():
        with lock:
            entered.set()

    lock.acquire()
    t = threading.Thread(target=worker)
    t.start()
    assert entered.wait(0.1) is False
    lock.release()
    t.join(5)
    assert entered.is_set()
    assert lock.locked is False