"""
Summary: Tests for the AudioFile facade and its candidate fall-through.
Why: A file claimed by several adapters must reach the one that understands it.
"""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar

import pytest
from pytest_mock import MockerFixture

from tagbridge.features.metadata.domain.audio_metadata import AudioMetadata
from tagbridge.features.metadata.domain.errors import (
    InputOutputError,
    IOFailure,
    UnsupportedFormatError,
)
from tagbridge.features.metadata.usecases.audio_file import (
    AudioFile,
    path_of,
    read_metadata,
    write_metadata,
)
from tagbridge.features.metadata.usecases.ports import AudioFormatAdapter, WriteOptions
from tagbridge.features.metadata.usecases.registry import HandlerRegistry


class _RejectingAdapter(AudioFormatAdapter):
    FORMAT_NAME = "Rejecting"
    EXTENSIONS: ClassVar[frozenset[str]] = frozenset({"snd"})

    def read(self, path: Path) -> AudioMetadata:
        raise InputOutputError.invalid_format(path, self.FORMAT_NAME)

    def write(self, metadata: AudioMetadata, path: Path) -> None:
        raise AssertionError("write must not reach a rejecting adapter")


class _AcceptingAdapter(AudioFormatAdapter):
    FORMAT_NAME = "Accepting"
    EXTENSIONS: ClassVar[frozenset[str]] = frozenset({"snd"})
    written: ClassVar[list[tuple[str | None, Path]]] = []

    def read(self, path: Path) -> AudioMetadata:
        metadata = AudioMetadata()
        metadata.title = path.stem
        metadata.merge_changes()
        return metadata

    def write(self, metadata: AudioMetadata, path: Path) -> None:
        type(self).written.append((metadata.title, path))
        metadata.merge_changes()


class _BrokenAdapter(AudioFormatAdapter):
    FORMAT_NAME = "Broken"
    EXTENSIONS: ClassVar[frozenset[str]] = frozenset({"snd"})

    def read(self, path: Path) -> AudioMetadata:
        raise InputOutputError.open_for_reading(path)

    def write(self, metadata: AudioMetadata, path: Path) -> None:
        raise InputOutputError.open_for_writing(path)


@pytest.fixture(autouse=True)
def _reset_written() -> None:
    _AcceptingAdapter.written = []


def _registry(*adapters: type[AudioFormatAdapter]) -> HandlerRegistry:
    registry = HandlerRegistry()
    for priority, adapter in enumerate(reversed(adapters)):
        registry.register(adapter, priority=priority)
    return registry


def test_read_falls_through_invalid_format(tmp_path: Path) -> None:
    """A candidate rejecting the structure hands over to the next one."""

    target = tmp_path / "tune.snd"
    audio_file = AudioFile.read(target, _registry(_RejectingAdapter, _AcceptingAdapter), WriteOptions())

    assert audio_file.metadata.title == "tune"
    assert isinstance(audio_file.adapter, _AcceptingAdapter)
    assert not audio_file.metadata.has_changes


def test_read_reraises_last_invalid_format(tmp_path: Path) -> None:
    """When every candidate rejects the file, the last rejection propagates."""

    registry = _registry(_RejectingAdapter, _RejectingAdapter)

    with pytest.raises(InputOutputError) as excinfo:
        _ = AudioFile.read(tmp_path / "tune.snd", registry, WriteOptions())

    assert excinfo.value.reason is IOFailure.INVALID_FORMAT


class _OtherRejectingAdapter(_RejectingAdapter):
    FORMAT_NAME = "Other"


def test_read_reports_final_candidate_rejection(tmp_path: Path) -> None:
    """The error raised names the format of the last candidate tried."""

    registry = _registry(_RejectingAdapter, _OtherRejectingAdapter)
    audio_file = AudioFile(tmp_path / "tune.snd", registry, WriteOptions())

    with pytest.raises(InputOutputError) as excinfo:
        _ = audio_file.read_metadata()

    assert excinfo.value.failure_reason == "Not a Other file"
    assert audio_file.adapter is None


def test_read_propagates_other_failures(tmp_path: Path) -> None:
    """Failures other than an invalid format stop the search."""

    registry = _registry(_BrokenAdapter, _AcceptingAdapter)

    with pytest.raises(InputOutputError) as excinfo:
        _ = AudioFile.read(tmp_path / "tune.snd", registry, WriteOptions())

    assert excinfo.value.reason is IOFailure.OPEN_FOR_READING


def test_unknown_extension_is_unsupported(tmp_path: Path) -> None:
    registry = _registry(_AcceptingAdapter)

    with pytest.raises(UnsupportedFormatError):
        _ = AudioFile.read(tmp_path / "notes.txt", registry, WriteOptions())
    with pytest.raises(UnsupportedFormatError):
        AudioFile(tmp_path / "notes.txt", registry, WriteOptions()).write()


def test_write_uses_adapter_that_read(tmp_path: Path) -> None:
    """Writing goes through the adapter selected while reading."""

    target = tmp_path / "tune.snd"
    audio_file = AudioFile.read(target, _registry(_RejectingAdapter, _AcceptingAdapter), WriteOptions())
    audio_file.metadata.title = "Renamed"
    audio_file.write()

    assert _AcceptingAdapter.written == [("Renamed", target)]
    assert not audio_file.metadata.has_changes


def test_write_without_read_resolves_adapter(tmp_path: Path) -> None:
    target = tmp_path / "tune.snd"
    audio_file = AudioFile(target, _registry(_AcceptingAdapter), WriteOptions())
    audio_file.metadata.title = "Fresh"
    audio_file.write()

    assert _AcceptingAdapter.written == [("Fresh", target)]
    assert isinstance(audio_file.adapter, _AcceptingAdapter)


def test_file_urls_resolve_to_paths(tmp_path: Path) -> None:
    """``file`` URLs are accepted wherever a path is."""

    target = tmp_path / "My Tune.snd"
    url = target.as_uri()

    assert path_of(url) == target
    assert path_of(str(target)) == target
    metadata = read_metadata(url, _registry(_AcceptingAdapter))
    assert metadata.title == "My Tune"


def test_module_helpers_use_shared_registry(mocker: MockerFixture, tmp_path: Path) -> None:
    """Without an explicit registry the shared default registry is consulted."""

    registry = _registry(_AcceptingAdapter)
    _ = mocker.patch(
        "tagbridge.features.metadata.usecases.audio_file._shared_registry",
        return_value=registry,
    )
    target = tmp_path / "tune.snd"

    metadata = read_metadata(target)
    metadata.title = "Changed"
    write_metadata(metadata, target)

    assert _AcceptingAdapter.written == [("Changed", target)]
