from services.usage_meter import DAILY_QUOTA, UsageMeter


def test_subscribe_fires_immediately_and_on_increment():
    meter = UsageMeter()
    meter.increment()
    seen: list[int] = []

    unsubscribe = meter.subscribe(seen.append)
    meter.increment()
    meter.increment()
    unsubscribe()
    meter.increment()

    assert seen == [1, 2, 3]
    assert meter.count == 4


def test_unsubscribe_twice_is_harmless():
    meter = UsageMeter()
    unsubscribe = meter.subscribe(lambda count: None)
    unsubscribe()
    unsubscribe()


def test_failing_listener_does_not_break_increment():
    meter = UsageMeter()
    seen: list[int] = []

    def broken(count: int) -> None:
        if count:
            raise RuntimeError("listener boom")

    meter.subscribe(broken)
    meter.subscribe(seen.append)
    assert meter.increment() == 1
    assert seen == [0, 1]


def test_remaining_is_advisory():
    meter = UsageMeter()
    for _ in range(3):
        meter.increment()
    assert meter.remaining(2) == 0
    assert meter.remaining() == DAILY_QUOTA - 3
    meter.reset()
    assert meter.count == 0
