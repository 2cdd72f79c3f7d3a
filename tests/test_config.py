"""Tests for voxaurora.config — environment parsing helpers."""

from voxaurora.config import _env_bool, _env_float, _env_int, _env_list, frames_for


class TestEnvHelpers:
    def test_float_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("VOXAURORA_TEST_VALUE", raising=False)
        assert _env_float("VOXAURORA_TEST_VALUE", 0.5) == 0.5

    def test_float_parsed(self, monkeypatch):
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", "0.8")
        assert _env_float("VOXAURORA_TEST_VALUE", 0.5) == 0.8

    def test_invalid_float_falls_back(self, monkeypatch):
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", "high")
        assert _env_float("VOXAURORA_TEST_VALUE", 0.5) == 0.5

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", "4.5")
        assert _env_int("VOXAURORA_TEST_VALUE", 4) == 4

    def test_bool(self, monkeypatch):
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", "Yes")
        assert _env_bool("VOXAURORA_TEST_VALUE", False) is True
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", "0")
        assert _env_bool("VOXAURORA_TEST_VALUE", True) is False

    def test_list(self, monkeypatch):
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", " en , fr ,,")
        assert _env_list("VOXAURORA_TEST_VALUE", ("de",)) == ("en", "fr")

    def test_empty_list_falls_back(self, monkeypatch):
        monkeypatch.setenv("VOXAURORA_TEST_VALUE", " , ")
        assert _env_list("VOXAURORA_TEST_VALUE", ("de",)) == ("de",)


class TestFramesFor:
    def test_rounds_to_whole_frames(self):
        assert frames_for(0.09, 0.03) == 3
        assert frames_for(0.6, 0.03) == 20

    def test_at_least_one_frame(self):
        assert frames_for(0.0, 0.03) == 1
