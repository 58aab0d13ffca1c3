import pytest

from tmplgen.artifact_writer import write_template
from tmplgen.errors import FilesystemError, ValidationError


class TestWriteTemplate:
    def test_creates_directory_and_file(self, tmp_path):
        target = tmp_path / "nested" / "templates"
        path = write_template("welcome_email", "<html>hi</html>", target)

        assert path == (target / "welcome_email.html").resolve()
        assert path.is_absolute()
        assert path.read_text(encoding="utf-8") == "<html>hi</html>"

    def test_existing_directory_is_fine(self, tmp_path):
        write_template("a", "1", tmp_path)
        write_template("b", "2", tmp_path)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.html", "b.html"]

    def test_overwrites_previous_version(self, tmp_path):
        write_template("welcome_email", "old", tmp_path)
        path = write_template("welcome_email", "new ✓", tmp_path)
        assert path.read_text(encoding="utf-8") == "new ✓"

    def test_default_directory_is_relative_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = write_template("welcome_email", "<p/>")
        assert path == (tmp_path / "templates" / "welcome_email.html").resolve()

    @pytest.mark.parametrize("name", ["../escape", "a/b", "a\\b", ""])
    def test_rejects_names_that_are_not_plain_file_names(self, tmp_path, name):
        with pytest.raises(ValidationError):
            write_template(name, "<p/>", tmp_path)

    def test_write_failure_is_a_filesystem_error(self, tmp_path):
        blocker = tmp_path / "templates"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(FilesystemError):
            write_template("welcome_email", "<p/>", blocker)
