from types import SimpleNamespace

from tab_tracker import paths


def test_database_and_log_live_in_platform_dirs(tmp_path, monkeypatch):
    dirs = SimpleNamespace(
        user_data_path=tmp_path / "data",
        user_log_path=tmp_path / "logs",
    )
    monkeypatch.setattr(paths, "_DIRS", dirs)

    assert paths.get_db_path() == tmp_path / "data" / "tab_activity.sqlite3"
    assert paths.get_log_path() == tmp_path / "logs" / "tracker.log"
    assert (tmp_path / "data").is_dir()
    assert (tmp_path / "logs").is_dir()
