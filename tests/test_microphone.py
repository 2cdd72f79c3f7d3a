"""Tests for voxaurora.audio.microphone — capture and device selection."""

import numpy as np
import pytest

from voxaurora.audio.frame_queue import FrameQueue
from voxaurora.audio.microphone import MicrophoneSource, list_input_devices, resolve_device
from voxaurora.errors import AudioDeviceError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_DEVICES = [
    {"name": "speakers", "max_input_channels": 0, "default_samplerate": 48000.0},
    {"name": "usb-mic", "max_input_channels": 1, "default_samplerate": 48000.0},
    {"name": "webcam", "max_input_channels": 2, "default_samplerate": 16000.0},
]


def _mock_query_devices(device=None, kind=None):
    if kind == "input":
        index = 1 if device is None else device
        return _DEVICES[index]
    return _DEVICES


def _mock_query_devices_fail(*args, **kwargs):
    raise OSError("No input device")


class MockInputStream:
    """Records construction kwargs and start/stop calls."""

    instances: list["MockInputStream"] = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.started = False
        self.closed = False
        MockInputStream.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


@pytest.fixture
def mock_sd(monkeypatch):
    MockInputStream.instances = []
    monkeypatch.setattr("voxaurora.audio.microphone.sd.query_devices", _mock_query_devices)
    monkeypatch.setattr("voxaurora.audio.microphone.sd.InputStream", MockInputStream)


# ---------------------------------------------------------------------------
# Device enumeration
# ---------------------------------------------------------------------------


class TestDevices:
    def test_lists_only_input_devices(self, mock_sd):
        assert list_input_devices() == [(1, "usb-mic"), (2, "webcam")]

    def test_resolve_valid_index(self, mock_sd):
        assert resolve_device("2") == 2

    def test_resolve_blank_is_default(self, mock_sd):
        assert resolve_device("") is None
        assert resolve_device(None) is None

    def test_resolve_non_numeric_falls_back(self, mock_sd):
        assert resolve_device("usb") is None

    def test_resolve_out_of_range_falls_back(self, mock_sd):
        assert resolve_device("7") is None

    def test_resolve_output_only_device_falls_back(self, mock_sd):
        assert resolve_device("0") is None


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_start_opens_stream_at_device_rate(self, mock_sd):
        source = MicrophoneSource(FrameQueue(8), frame_duration=0.03)
        source.start()

        stream = MockInputStream.instances[0]
        assert stream.started is True
        assert stream.kwargs["samplerate"] == 48000
        assert stream.kwargs["blocksize"] == 1440
        assert stream.kwargs["channels"] == 1
        assert stream.kwargs["dtype"] == "int16"
        assert source.is_running is True
        assert source.sample_rate == 48000

    def test_start_failure_raises_audio_device_error(self, monkeypatch):
        monkeypatch.setattr(
            "voxaurora.audio.microphone.sd.query_devices", _mock_query_devices_fail
        )
        source = MicrophoneSource(FrameQueue(8))

        with pytest.raises(AudioDeviceError):
            source.start()
        assert source.is_running is False

    def test_stop_closes_stream_and_is_idempotent(self, mock_sd):
        source = MicrophoneSource(FrameQueue(8))
        source.start()
        source.stop()
        source.stop()

        assert MockInputStream.instances[0].closed is True
        assert source.is_running is False


# ---------------------------------------------------------------------------
# Callback
# ---------------------------------------------------------------------------


class TestCallback:
    def test_callback_pushes_sequenced_frames(self, mock_sd):
        queue = FrameQueue(8)
        source = MicrophoneSource(queue, frame_duration=0.03)
        source.start()

        block = np.full((1440, 1), 1000, dtype=np.int16)
        source._callback(block, 1440, None, None)
        source._callback(block, 1440, None, None)

        frames = queue.pop_batch(timeout=0.1)
        assert [f.sequence for f in frames] == [0, 1]
        assert frames[0].sample_rate == 48000
        assert frames[0].samples.shape == (1440,)
        assert frames[1].start_time == pytest.approx(0.03)

    def test_callback_copies_buffer(self, mock_sd):
        queue = FrameQueue(8)
        source = MicrophoneSource(queue)
        source.start()

        block = np.full((480, 1), 1000, dtype=np.int16)
        source._callback(block, 480, None, None)
        block[:] = 0

        (frame,) = queue.pop_batch(timeout=0.1)
        assert int(frame.samples[0]) == 1000

    def test_callback_counts_status_errors(self, mock_sd):
        source = MicrophoneSource(FrameQueue(8))
        source.start()

        source._callback(np.zeros((480, 1), dtype=np.int16), 480, None, "input overflow")
        assert source.status_errors == 1
