import pytest


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every CLI test in an empty directory without user settings."""
    monkeypatch.setattr(
        "vmpckit.infra.config.file_io.SETTING_PATH",
        tmp_path / "user" / "settings.json",
    )
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir
