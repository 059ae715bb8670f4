import pytest

from neurospell.config import CONFIG
from neurospell.eeg.segmenter import Segmenter


@pytest.fixture()
def segmenter():
    return Segmenter.from_config(CONFIG)


def test_config_windows_match_nominal_rate():
    assert CONFIG.segment_length == 256
    assert CONFIG.sub_window_length == 32
    assert CONFIG.slide_samples == 4


@pytest.mark.parametrize("length", [0, 1, 255, 256, 257, 511, 512, 1000])
def test_to_segments_keeps_only_full_windows(segmenter, make_samples, length):
    samples = make_samples(length)
    segments = segmenter.to_segments(samples)

    assert len(segments) == length // 256
    for idx, segment in enumerate(segments):
        assert len(segment) == 256
        assert segment.samples == tuple(samples[idx * 256 : (idx + 1) * 256])
        assert segment.start_time == samples[idx * 256].timestamp
        assert segment.end_time == samples[idx * 256 + 255].timestamp


def test_sub_segments_slide_by_four(segmenter, make_samples):
    segment = segmenter.to_segments(make_samples(256))[0]
    subs = segmenter.to_sub_segments(segment)

    assert len(subs) == 57 == segmenter.sub_segments_per_segment
    for idx, sub in enumerate(subs):
        assert len(sub) == 32
        assert sub.samples[0] is segment.samples[4 * idx]
    assert subs[-1].samples[-1] is segment.samples[-1]
    # consecutive windows share 28 samples
    assert subs[0].samples[4:] == subs[1].samples[:28]


def test_process_recording_drops_trailing_samples(segmenter, make_samples):
    recording = segmenter.process_recording(make_samples(313))

    assert len(recording.segments) == 1
    assert len(recording.sub_segments) == 1
    assert len(recording.sub_segments[0]) == 57
    assert recording.sub_segment_total == 57


def test_empty_recording_has_no_segments(segmenter):
    recording = segmenter.process_recording([])
    assert recording.segments == []
    assert recording.sub_segments == []


def test_segmenter_rejects_bad_windows():
    with pytest.raises(ValueError):
        Segmenter(16, sub_window_length=32, slide=4)
    with pytest.raises(ValueError):
        Segmenter(256, sub_window_length=32, slide=0)


def test_segment_to_array_shape(segmenter, make_samples):
    segment = segmenter.to_segments(make_samples(256, channels=14))[0]
    assert segment.to_array().shape == (256, 14)
