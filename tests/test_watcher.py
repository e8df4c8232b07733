import os
import threading
from pathlib import Path

import pytest

from save_archiver.core import watcher as watcher_module
from save_archiver.core.errors import CopyError, WatchReadError
from save_archiver.core.watcher import NANOSECONDS, SaveWatcher, WatcherState


class Recorder:
    def __init__(self):
        self.backups = []
        self.errors = []
        self.backed_up = threading.Event()

    def on_backup(self, directory, entry):
        self.backups.append((directory, entry))
        self.backed_up.set()

    def on_error(self, directory, error):
        self.errors.append((directory, error))


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def make_watcher(save_dir: Path, save_spec, recorder: Recorder, since: int = 0, **kwargs) -> SaveWatcher:
    return SaveWatcher(
        str(save_dir), save_spec,
        high_water_mark_ns=since * NANOSECONDS,
        on_backup=recorder.on_backup,
        on_error=recorder.on_error,
        **kwargs
    )


def backups_in(directory: Path):
    return sorted(p.name for p in directory.glob("*.sav.bak"))


def test_change_creates_backup(save_dir, save_spec, recorder, set_mtime):
    set_mtime(save_dir / "DDDA.sav", 100)
    watcher = make_watcher(save_dir, save_spec, recorder)

    entry = watcher.poll_once()

    assert entry.filename == "DDDA-100.sav.bak"
    assert entry.timestamp == 100
    assert (save_dir / "DDDA-100.sav.bak").read_bytes() == b"A"
    assert recorder.backups == [(str(save_dir), entry)]
    assert watcher.state is WatcherState.IDLE


def test_unchanged_file_is_not_backed_up_twice(save_dir, save_spec, recorder, set_mtime):
    set_mtime(save_dir / "DDDA.sav", 100)
    watcher = make_watcher(save_dir, save_spec, recorder)

    watcher.poll_once()
    assert watcher.poll_once() is None

    assert backups_in(save_dir) == ["DDDA-100.sav.bak"]
    assert len(recorder.backups) == 1


def test_only_strictly_newer_times_trigger(save_dir, save_spec, recorder, set_mtime):
    live = save_dir / "DDDA.sav"
    watcher = make_watcher(save_dir, save_spec, recorder, since=100)

    for mtime in (100, 100, 250):
        set_mtime(live, mtime)
        watcher.poll_once()

    assert backups_in(save_dir) == ["DDDA-250.sav.bak"]
    assert watcher.high_water_mark_ns == 250 * NANOSECONDS


def test_older_time_is_ignored(save_dir, save_spec, recorder, set_mtime):
    live = save_dir / "DDDA.sav"
    watcher = make_watcher(save_dir, save_spec, recorder, since=0)
    set_mtime(live, 300)
    watcher.poll_once()

    set_mtime(live, 200)
    assert watcher.poll_once() is None

    assert backups_in(save_dir) == ["DDDA-300.sav.bak"]
    assert recorder.errors == []


def test_subsecond_times_name_whole_seconds(save_dir, save_spec, recorder):
    mtime_ns = 250 * NANOSECONDS + 500_000_000
    os.utime(save_dir / "DDDA.sav", ns=(mtime_ns, mtime_ns))
    watcher = make_watcher(save_dir, save_spec, recorder)

    assert watcher.poll_once().filename == "DDDA-250.sav.bak"
    assert watcher.high_water_mark_ns == mtime_ns


def test_second_change_within_same_second_keeps_first_backup(save_dir, save_spec, recorder):
    live = save_dir / "DDDA.sav"
    first_ns = 250 * NANOSECONDS + 100
    os.utime(live, ns=(first_ns, first_ns))
    watcher = make_watcher(save_dir, save_spec, recorder)
    watcher.poll_once()

    live.write_bytes(b"SECOND")
    second_ns = 250 * NANOSECONDS + 600_000_000
    os.utime(live, ns=(second_ns, second_ns))

    assert watcher.poll_once() is None
    assert (save_dir / "DDDA-250.sav.bak").read_bytes() == b"A"
    assert backups_in(save_dir) == ["DDDA-250.sav.bak"]
    assert len(recorder.backups) == 1


def test_existing_backup_is_never_overwritten(save_dir, save_spec, recorder, set_mtime):
    (save_dir / "DDDA-300.sav.bak").write_bytes(b"archived")
    set_mtime(save_dir / "DDDA.sav", 300)
    watcher = make_watcher(save_dir, save_spec, recorder)

    assert watcher.poll_once() is None

    assert (save_dir / "DDDA-300.sav.bak").read_bytes() == b"archived"
    assert [type(e) for _, e in recorder.errors] == [CopyError]
    assert isinstance(recorder.errors[0][1].cause, FileExistsError)
    assert watcher.state is WatcherState.IDLE


def test_default_high_water_mark_skips_existing_content(save_dir, save_spec, recorder, set_mtime):
    set_mtime(save_dir / "DDDA.sav", 100)
    watcher = SaveWatcher(str(save_dir), save_spec, on_backup=recorder.on_backup)

    assert watcher.poll_once() is None
    assert backups_in(save_dir) == []


def test_read_failure_stops_watcher(save_dir, save_spec, recorder, set_mtime):
    watcher = make_watcher(save_dir, save_spec, recorder)
    (save_dir / "DDDA.sav").unlink()

    assert watcher.poll_once() is None

    assert watcher.state is WatcherState.STOPPED
    assert isinstance(watcher.error, WatchReadError)
    assert watcher.error.path == str(save_dir / "DDDA.sav")
    assert [type(e) for _, e in recorder.errors] == [WatchReadError]

    # No resume once stopped, even if the save comes back
    (save_dir / "DDDA.sav").write_bytes(b"B")
    set_mtime(save_dir / "DDDA.sav", 500)
    assert watcher.poll_once() is None
    assert backups_in(save_dir) == []


def test_copy_failure_is_reported_and_polling_continues(save_dir, save_spec, recorder, set_mtime, monkeypatch):
    def failing_copy(source, destination, overwrite=True):
        raise CopyError(source, destination, OSError("disk full"))

    monkeypatch.setattr(watcher_module, "copy_file", failing_copy)
    set_mtime(save_dir / "DDDA.sav", 100)
    watcher = make_watcher(save_dir, save_spec, recorder)

    assert watcher.poll_once() is None

    assert watcher.state is WatcherState.IDLE
    assert [type(e) for _, e in recorder.errors] == [CopyError]
    assert recorder.backups == []
    assert watcher.high_water_mark_ns == 100 * NANOSECONDS


def test_background_loop_backs_up_and_stops(save_dir, save_spec, recorder, set_mtime):
    set_mtime(save_dir / "DDDA.sav", 100)
    watcher = make_watcher(save_dir, save_spec, recorder, poll_interval=0.01)

    watcher.start()
    try:
        assert recorder.backed_up.wait(5)
    finally:
        watcher.stop(timeout=5)

    assert not watcher.is_running
    assert watcher.state is WatcherState.STOPPED
    assert backups_in(save_dir) == ["DDDA-100.sav.bak"]


def test_loop_exits_after_read_failure(save_dir, save_spec, recorder):
    (save_dir / "DDDA.sav").unlink()
    watcher = make_watcher(save_dir, save_spec, recorder, poll_interval=0.01)

    watcher.start()
    watcher._thread.join(5)

    assert not watcher.is_running
    assert watcher.state is WatcherState.STOPPED
    assert len(recorder.errors) == 1


def test_stopped_watcher_cannot_restart(save_dir, save_spec, recorder):
    watcher = make_watcher(save_dir, save_spec, recorder)
    watcher.stop()

    with pytest.raises(RuntimeError):
        watcher.start()
