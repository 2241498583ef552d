import threading

import pytest

from handlerkit.domain.base.ports import CancellationPort
from handlerkit.infrastructure import CancellationToken, Deadline


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def test_token_starts_uncancelled():
    token = CancellationToken.never()

    assert not token.is_cancelled
    assert token.reason is None
    assert isinstance(token, CancellationPort)


def test_first_cancel_reason_wins():
    # Arrange
    token = CancellationToken()

    # Act
    token.cancel("shutdown")
    token.cancel("second call")

    # Assert
    assert token.is_cancelled
    assert token.reason == "shutdown"


def test_cancel_from_another_thread_wakes_waiter():
    token = CancellationToken()
    thread = threading.Thread(target=token.cancel)

    thread.start()
    woke = token.wait(timeout=5)
    thread.join()

    assert woke is True


def test_deadline_fires_after_expiry():
    # Arrange
    clock = FakeClock()
    deadline = Deadline(2.0, clock=clock)

    # Act & Assert
    assert not deadline.is_cancelled
    assert deadline.remaining == 2.0

    clock.now += 2.5
    assert deadline.is_cancelled
    assert deadline.remaining == 0.0
    assert deadline.reason == "deadline of 2s exceeded"


def test_deadline_can_be_cancelled_early():
    deadline = Deadline(10, clock=FakeClock())

    deadline.cancel("caller gave up")

    assert deadline.is_cancelled
    assert deadline.reason == "caller gave up"


def test_deadline_must_be_positive():
    with pytest.raises(ValueError):
        Deadline(0)
