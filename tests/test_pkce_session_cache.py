try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import threading

from app.services.pkce_sessions import PKCESessionCache


def test_consume_returns_session_once(clock) -> None:
    cache = PKCESessionCache(ttl_seconds=600, clock=clock)
    cache.register(state="u1:abc", code_verifier="verifier", external_id="u1")

    session = cache.consume("u1:abc")
    assert session is not None
    assert session.code_verifier == "verifier"
    assert session.external_id == "u1"
    assert session.expires_at == clock.now + 600

    assert cache.consume("u1:abc") is None
    assert len(cache) == 0


def test_unknown_state_is_rejected(clock) -> None:
    cache = PKCESessionCache(clock=clock)
    assert cache.consume("nobody:000") is None


def test_session_used_after_deadline_is_rejected(clock) -> None:
    cache = PKCESessionCache(ttl_seconds=600, clock=clock)
    cache.register(state="u1:late", code_verifier="v", external_id="u1")

    clock.advance(601)

    assert cache.consume("u1:late") is None


def test_session_used_at_deadline_is_still_valid(clock) -> None:
    cache = PKCESessionCache(ttl_seconds=600, clock=clock)
    cache.register(state="u1:edge", code_verifier="v", external_id="u1")

    clock.advance(600)

    assert cache.consume("u1:edge") is not None


def test_register_prunes_expired_sessions(clock) -> None:
    cache = PKCESessionCache(ttl_seconds=600, clock=clock)
    cache.register(state="old:1", code_verifier="v", external_id="old")
    cache.register(state="old:2", code_verifier="v", external_id="old")

    clock.advance(700)
    cache.register(state="new:1", code_verifier="v", external_id="new")

    assert len(cache) == 1
    assert cache.consume("new:1") is not None


def test_prune_reports_removed_count(clock) -> None:
    cache = PKCESessionCache(ttl_seconds=10, clock=clock)
    cache.register(state="a:1", code_verifier="v", external_id="a")
    clock.advance(5)
    cache.register(state="b:1", code_verifier="v", external_id="b")
    clock.advance(6)

    assert cache.prune() == 1
    assert len(cache) == 1


def test_concurrent_consumers_get_the_session_at_most_once(clock) -> None:
    cache = PKCESessionCache(clock=clock)
    cache.register(state="race:1", code_verifier="v", external_id="race")

    winners = []
    barrier = threading.Barrier(8)

    def consume() -> None:
        barrier.wait()
        if cache.consume("race:1") is not None:
            winners.append(1)

    threads = [threading.Thread(target=consume) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
