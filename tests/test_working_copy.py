"""Tests for working-copy discovery and settings."""

import pytest

from revision_commit.config import ConfigError
from revision_commit.working_copy import SETTINGS_FILENAME, WorkingCopy, find_working_copy


class TestFindWorkingCopy:

    def test_settings_file_marks_root(self, tmp_path):
        (tmp_path / ".svn").mkdir()
        (tmp_path / SETTINGS_FILENAME).write_text("remote_hooks_installed: true\nproject: demo\n")
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)

        wc = find_working_copy(nested)

        assert wc.root == tmp_path.resolve()
        assert wc.vcs == "svn"
        assert wc.remote_hooks_installed is True
        assert wc.get_setting("project") == "demo"

    def test_json_settings_accepted(self, tmp_path):
        (tmp_path / SETTINGS_FILENAME).write_text('{"remote_hooks_installed": false}')
        assert find_working_copy(tmp_path).remote_hooks_installed is False

    def test_outermost_svn_directory_without_settings(self, tmp_path):
        (tmp_path / "wc" / ".svn").mkdir(parents=True)
        (tmp_path / "wc" / "sub" / ".svn").mkdir(parents=True)

        wc = find_working_copy(tmp_path / "wc" / "sub")

        assert wc.root == (tmp_path / "wc").resolve()
        assert wc.settings == {}
        assert wc.remote_hooks_installed is False

    def test_settings_above_svn_root_ignored(self, tmp_path):
        """A stray settings file in an ancestor (e.g. $HOME) does not move the root."""
        (tmp_path / SETTINGS_FILENAME).write_text("remote_hooks_installed: true\n")
        (tmp_path / "wc" / ".svn").mkdir(parents=True)
        (tmp_path / "wc" / "sub").mkdir()

        wc = find_working_copy(tmp_path / "wc" / "sub")

        assert wc.root == (tmp_path / "wc").resolve()
        assert wc.vcs == "svn"
        assert wc.settings == {}
        assert wc.remote_hooks_installed is False

    def test_falls_back_to_start(self, tmp_path):
        wc = find_working_copy(tmp_path)
        assert wc.root == tmp_path.resolve()

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / SETTINGS_FILENAME).write_text("remote_hooks_installed: [unclosed\n")
        with pytest.raises(ConfigError):
            find_working_copy(tmp_path)

    def test_non_mapping_settings(self, tmp_path):
        (tmp_path / SETTINGS_FILENAME).write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            find_working_copy(tmp_path)

    def test_empty_settings_file(self, tmp_path):
        (tmp_path / SETTINGS_FILENAME).write_text("")
        assert find_working_copy(tmp_path).settings == {}


def test_default_working_copy_has_no_hooks(tmp_path):
    assert WorkingCopy(root=tmp_path).remote_hooks_installed is False
