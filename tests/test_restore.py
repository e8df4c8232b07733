import os
from pathlib import Path

import pytest

from save_archiver.core import restore as restore_module
from save_archiver.core.errors import CopyError, RestoreAborted, RestoreTimestampWarning
from save_archiver.core.models import RestoreStage
from save_archiver.core.restore import RestoreTransaction
from save_archiver.utils.formatters import format_backup_label

BACKUP = "DDDA-500.sav.bak"
BACKUP_MTIME = 1600000000


@pytest.fixture
def transaction(save_spec) -> RestoreTransaction:
    return RestoreTransaction(save_spec)


@pytest.fixture
def backup(save_dir: Path, set_mtime) -> Path:
    path = save_dir / BACKUP
    path.write_bytes(b"B")
    set_mtime(path, BACKUP_MTIME)
    return path


def test_restore_swaps_backup_in(transaction, save_dir, backup):
    outcome = transaction.restore(str(save_dir), BACKUP)

    assert outcome.success
    assert outcome.label == format_backup_label(500)
    assert outcome.message == f"Backup '{format_backup_label(500)}' restored"
    assert outcome.warnings == []
    assert (save_dir / "DDDA.sav.orig").read_bytes() == b"A"
    assert (save_dir / "DDDA.sav").read_bytes() == b"B"
    assert os.stat(save_dir / "DDDA.sav").st_mtime_ns == BACKUP_MTIME * 1_000_000_000
    assert backup.read_bytes() == b"B"


def test_copy_failure_leaves_live_save_missing(transaction, save_dir, backup, monkeypatch):
    real_copy = restore_module.copy_file

    def copy_after_backup_vanished(source, destination):
        os.remove(source)
        real_copy(source, destination)

    monkeypatch.setattr(restore_module, "copy_file", copy_after_backup_vanished)

    outcome = transaction.restore(str(save_dir), BACKUP)

    assert not outcome.success
    assert outcome.stage is RestoreStage.COPY_BACKUP
    assert isinstance(outcome.error, RestoreAborted)
    assert isinstance(outcome.error.cause, CopyError)
    assert not (save_dir / "DDDA.sav").exists()
    assert (save_dir / "DDDA.sav.orig").read_bytes() == b"A"


def test_missing_live_save_aborts_before_anything_changes(transaction, save_dir, backup):
    (save_dir / "DDDA.sav").unlink()

    outcome = transaction.restore(str(save_dir), BACKUP)

    assert outcome.stage is RestoreStage.RENAME_LIVE
    assert not (save_dir / "DDDA.sav").exists()
    assert not (save_dir / "DDDA.sav.orig").exists()
    assert backup.read_bytes() == b"B"


def test_missing_backup_fails_after_rename(transaction, save_dir):
    outcome = transaction.restore(str(save_dir), BACKUP)

    assert outcome.stage is RestoreStage.READ_BACKUP_TIME
    assert not (save_dir / "DDDA.sav").exists()
    assert (save_dir / "DDDA.sav.orig").read_bytes() == b"A"


def test_timestamp_failure_is_only_a_warning(transaction, save_dir, backup, monkeypatch):
    def refuse_utime(*args, **kwargs):
        raise PermissionError("read-only timestamps")

    monkeypatch.setattr(restore_module.os, "utime", refuse_utime)

    outcome = transaction.restore(str(save_dir), BACKUP)

    assert outcome.success
    assert len(outcome.warnings) == 1
    assert isinstance(outcome.warnings[0], RestoreTimestampWarning)
    assert (save_dir / "DDDA.sav").read_bytes() == b"B"


@pytest.mark.parametrize("name", [
    "notes.txt",
    "DDDA-x.sav.bak",
    os.path.join("..", BACKUP),
])
def test_bad_backup_name_touches_nothing(transaction, save_dir, name):
    outcome = transaction.restore(str(save_dir), name)

    assert outcome.stage is RestoreStage.VALIDATE_NAME
    assert (save_dir / "DDDA.sav").read_bytes() == b"A"
    assert not (save_dir / "DDDA.sav.orig").exists()


def test_second_restore_keeps_latest_displaced_save(transaction, save_dir, backup):
    if os.name == "nt":
        pytest.skip("rename over an existing .orig is refused on Windows")
    transaction.restore(str(save_dir), BACKUP)
    (save_dir / "DDDA.sav").write_bytes(b"C")

    outcome = transaction.restore(str(save_dir), BACKUP)

    assert outcome.success
    assert (save_dir / "DDDA.sav.orig").read_bytes() == b"C"
