from __future__ import annotations

import sys
import types
from dataclasses import replace

import numpy as np
import pytest

from wavscribe.config import EngineConfig
from wavscribe.engine import TranscriptionEngine
from wavscribe.errors import InferenceError, ModelLoadError
from wavscribe.inference import decode_options


class FakeWhisperModel:
    instances: list["FakeWhisperModel"] = []
    fail_transcribe = False

    def __init__(self, model_size_or_path, device="cpu", compute_type="default"):
        self.model = model_size_or_path
        self.device = device
        self.compute_type = compute_type
        self.calls = []
        FakeWhisperModel.instances.append(self)

    def transcribe(self, audio, **kwargs):
        self.calls.append((audio, kwargs))
        if FakeWhisperModel.fail_transcribe:
            raise RuntimeError("CUDA out of memory")
        segments = [
            types.SimpleNamespace(start=1.5, end=3.0, text=" world."),
            types.SimpleNamespace(start=0.0, end=1.5, text=" Hello "),
        ]
        return iter(segments), types.SimpleNamespace(language="en")


@pytest.fixture
def fake_faster_whisper(monkeypatch):
    FakeWhisperModel.instances = []
    FakeWhisperModel.fail_transcribe = False
    module = types.ModuleType("faster_whisper")
    module.WhisperModel = FakeWhisperModel
    monkeypatch.setitem(sys.modules, "faster_whisper", module)
    return module


@pytest.fixture
def fake_transformers(monkeypatch):
    calls = {}

    def pipeline(task, model=None, device=None):
        calls["task"] = task
        calls["model"] = model
        calls["device"] = device

        def run(inputs, return_timestamps=False, generate_kwargs=None):
            calls["inputs"] = inputs
            calls["generate_kwargs"] = generate_kwargs
            return {
                "text": " one two",
                "chunks": [
                    {"timestamp": (0.0, 0.5), "text": " one"},
                    {"timestamp": (0.5, None), "text": " two"},
                ],
            }

        return run

    module = types.ModuleType("transformers")
    module.pipeline = pipeline
    monkeypatch.setitem(sys.modules, "transformers", module)
    return calls


@pytest.fixture
def no_faster_whisper(monkeypatch):
    monkeypatch.setitem(sys.modules, "faster_whisper", None)


@pytest.fixture
def no_transformers(monkeypatch):
    monkeypatch.setitem(sys.modules, "transformers", None)


def test_faster_whisper_backend(fake_faster_whisper):
    config = EngineConfig(backend="faster_whisper", model_path="models/base.en", beam_size=5)
    engine = TranscriptionEngine(config)

    segments = engine.transcribe(np.zeros(16000, dtype=np.float32))

    assert engine.backend == "faster_whisper"
    [model] = FakeWhisperModel.instances
    assert (model.model, model.device, model.compute_type) == ("models/base.en", "cpu", "int8")
    assert [s.text for s in segments] == ["Hello", "world."]
    assert [s.start_s for s in segments] == [0.0, 1.5]
    _, kwargs = model.calls[0]
    assert kwargs["beam_size"] == 5
    assert kwargs["language"] == "en"
    assert "patience" not in kwargs


def test_model_loaded_once(fake_faster_whisper):
    engine = TranscriptionEngine(EngineConfig(backend="faster_whisper"))
    engine.transcribe(np.zeros(10, dtype=np.float32))
    engine.transcribe(np.zeros(10, dtype=np.float32))
    assert len(FakeWhisperModel.instances) == 1


def test_empty_buffer_skips_inference(fake_faster_whisper):
    engine = TranscriptionEngine(EngineConfig(backend="faster_whisper"))
    assert engine.transcribe(np.zeros(0, dtype=np.float32)) == []
    assert FakeWhisperModel.instances[0].calls == []


def test_decode_options():
    greedy = decode_options(EngineConfig(strategy="greedy", beam_size=5))
    assert greedy["beam_size"] == 1
    beam = decode_options(EngineConfig(beam_size=5, patience=1.5, language=None))
    assert beam["beam_size"] == 5
    assert beam["patience"] == 1.5
    assert beam["language"] is None


def test_inference_failure(fake_faster_whisper):
    engine = TranscriptionEngine(EngineConfig(backend="faster_whisper"))
    FakeWhisperModel.fail_transcribe = True
    with pytest.raises(InferenceError, match="CUDA out of memory"):
        engine.transcribe(np.zeros(10, dtype=np.float32))


def test_auto_falls_back_to_transformers(no_faster_whisper, fake_transformers):
    config = EngineConfig(backend="auto", model_path="openai/whisper-base.en", beam_size=3)
    engine = TranscriptionEngine(config)
    assert engine.backend == "hf"
    assert "faster_whisper" in engine.backend_note

    segments = engine.transcribe(np.zeros(16000, dtype=np.float32))

    assert fake_transformers["task"] == "automatic-speech-recognition"
    assert fake_transformers["device"] == "cpu"
    assert fake_transformers["inputs"]["sampling_rate"] == 16000
    assert fake_transformers["generate_kwargs"] == {"language": "en", "num_beams": 3}
    assert [(s.start_s, s.end_s, s.text) for s in segments] == [(0.0, 0.5, "one"), (0.5, 1.0, "two")]


def test_auto_prefers_faster_whisper(fake_faster_whisper, fake_transformers):
    assert TranscriptionEngine(EngineConfig()).backend == "faster_whisper"
    assert "task" not in fake_transformers


def test_no_backend_available(no_faster_whisper, no_transformers):
    with pytest.raises(ModelLoadError):
        TranscriptionEngine(EngineConfig())


def test_explicit_backend_does_not_fall_back(no_faster_whisper, fake_transformers):
    with pytest.raises(ModelLoadError):
        TranscriptionEngine(EngineConfig(backend="faster_whisper"))


def test_unknown_backend():
    with pytest.raises(ModelLoadError, match="Unknown backend"):
        TranscriptionEngine(EngineConfig(backend="onnx"))


def test_model_load_failure(monkeypatch):
    class Broken:
        def __init__(self, *args, **kwargs):
            raise ValueError("Invalid model size 'nope'")

    module = types.ModuleType("faster_whisper")
    module.WhisperModel = Broken
    monkeypatch.setitem(sys.modules, "faster_whisper", module)
    with pytest.raises(ModelLoadError, match="Invalid model size"):
        TranscriptionEngine(replace(EngineConfig(), backend="faster_whisper", model_path="nope"))
