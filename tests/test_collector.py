import pytest

from neurospell.eeg.collector import Collector
from neurospell.eeg.stream import StreamLink
from neurospell.errors import AcquisitionBusy


@pytest.fixture()
def link():
    return StreamLink("ws://unused")


def test_collects_only_inside_window(link, make_samples):
    collector = Collector(link)
    early, inside, late = make_samples(3), make_samples(5, start_ms=100), make_samples(2, start_ms=900)

    for sample in early:
        link.samples.emit(sample)
    collector.start("recording")
    for sample in inside:
        link.samples.emit(sample)
    captured = collector.stop()
    for sample in late:
        link.samples.emit(sample)

    assert captured == tuple(inside)
    assert len(link.samples) == 0
    # the buffer is kept until the next start
    assert collector._buffer == list(inside)


def test_stop_without_start_returns_empty(link):
    collector = Collector(link)
    assert collector.stop() == ()
    assert collector.stop() == ()


def test_restart_never_double_counts(link, make_samples):
    collector = Collector(link)
    collector.start("recording")
    link.samples.emit(make_samples(1)[0])
    collector.start("recording")
    samples = make_samples(4)
    for sample in samples:
        link.samples.emit(sample)

    assert len(link.samples) == 1
    assert collector.stop() == tuple(samples)


def test_late_delivery_to_detached_listener_is_dropped(link, make_samples):
    collector = Collector(link)
    collector.start("recording")
    # A delivery loop that captured the listener before stop() ran.
    listeners = list(link.samples._listeners.values())
    collector.stop()
    for callback in listeners:
        callback(make_samples(1)[0])

    assert collector._buffer == []


def test_second_owner_is_refused(link):
    collector = Collector(link)
    collector.start("training")
    with pytest.raises(AcquisitionBusy):
        collector.start("recording")
    assert collector.owner == "training"
    collector.stop()
    collector.start("recording")
    assert collector.owner == "recording"


def test_reservation_blocks_other_flows_between_windows(link):
    collector = Collector(link)
    collector.reserve("recording")
    assert not collector.active

    with pytest.raises(AcquisitionBusy):
        collector.reserve("training")
    with pytest.raises(AcquisitionBusy):
        collector.start("training")

    collector.start("recording")
    collector.stop()
    collector.release("training")
    assert collector.reserved_by == "recording"
    collector.release("recording")
    collector.reserve("training")
    assert collector.reserved_by == "training"


def test_open_window_counts_as_reservation(link):
    collector = Collector(link)
    collector.start("training")
    with pytest.raises(AcquisitionBusy):
        collector.reserve("recording")
