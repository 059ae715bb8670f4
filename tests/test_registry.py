from neurospell.eeg.registry import ListenerRegistry


def test_subscription_scope_releases_handle():
    registry: ListenerRegistry[int] = ListenerRegistry("numbers")
    seen: list[int] = []

    with registry.subscription(seen.append) as handle:
        assert handle in registry
        registry.emit(1)
    registry.emit(2)

    assert seen == [1]
    assert len(registry) == 0
    assert registry.unsubscribe(handle) is False


def test_failing_listener_does_not_block_others():
    registry: ListenerRegistry[str] = ListenerRegistry("errors")
    seen: list[str] = []

    def broken(_: str) -> None:
        raise RuntimeError("boom")

    registry.subscribe(broken)
    registry.subscribe(seen.append)
    registry.emit("closed")

    assert seen == ["closed"]


def test_handles_are_unique():
    registry: ListenerRegistry[int] = ListenerRegistry("numbers")
    first = registry.subscribe(lambda _: None)
    registry.unsubscribe(first)
    second = registry.subscribe(lambda _: None)
    assert first != second
