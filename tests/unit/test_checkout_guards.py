import threading

from storefront.checkout.guards import EffectOnceGuard


def test_try_enter_is_exclusive_until_leave():
    guard = EffectOnceGuard()
    assert guard.try_enter("ABC") is True
    assert guard.try_enter("ABC") is False
    assert guard.try_enter("XYZ") is True
    guard.leave("ABC")
    assert guard.try_enter("ABC") is True


def test_once_context_manager_releases_on_error():
    guard = EffectOnceGuard()
    try:
        with guard.once("K") as entered:
            assert entered is True
            with guard.once("K") as nested:
                assert nested is False
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert guard.is_in_flight("K") is False


def test_only_one_thread_enters():
    guard = EffectOnceGuard()
    barrier = threading.Barrier(8)
    winners = []

    def _worker():
        barrier.wait()
        if guard.try_enter("T"):
            winners.append(1)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(winners) == 1
