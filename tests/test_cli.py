from unittest.mock import MagicMock, patch

import pytest

from tmplgen import cli
from tmplgen.config import Settings
from tmplgen.errors import ExternalCallError, FilesystemError, ValidationError

READY = Settings(
    jira_base_url="https://example.atlassian.net",
    jira_username="bot@example.com",
    jira_token="jira-token",
    gemini_api_key="gemini-key",
    anthropic_api_key="anthropic-key",
)


class TestParser:
    def test_short_flags(self):
        args = cli.build_parser().parse_args(["generate", "-t", "PROJ-123", "-c"])
        assert args.task == "PROJ-123"
        assert args.create_mr is True

    def test_create_mr_defaults_off(self):
        args = cli.build_parser().parse_args(["generate", "--task", "ab_c-9"])
        assert args.create_mr is False
        assert args.output_dir is None
        assert args.workspace is None

    @pytest.mark.parametrize("value", ["PROJ", "123", "PROJ-", "PROJ-12a", "-PROJ-1"])
    def test_rejects_malformed_task(self, value):
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(["generate", "--task", value])
        assert exc.value.code == 2

    def test_task_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["generate"])


class TestRun:
    def test_missing_configuration_exits_7(self):
        with patch("tmplgen.cli.load_settings", return_value=Settings()), \
                patch("tmplgen.cli.get_jira_client") as get_jira:
            assert cli.run(["generate", "--task", "PROJ-1"]) == 7
        get_jira.assert_not_called()

    def test_create_mr_without_gitlab_fails_before_network(self):
        with patch("tmplgen.cli.load_settings", return_value=READY), \
                patch("tmplgen.cli.get_jira_client") as get_jira:
            assert cli.run(["generate", "--task", "PROJ-1", "--create-mr"]) == 7
        get_jira.assert_not_called()

    @pytest.mark.parametrize("error, code", [
        (ExternalCallError("down"), 3),
        (ValidationError("bad"), 5),
        (FilesystemError("disk"), 6),
    ])
    def test_error_kinds_map_to_exit_codes(self, error, code, capsys):
        with patch("tmplgen.cli.load_settings", return_value=READY), \
                patch("tmplgen.cli.generate", side_effect=error):
            assert cli.run(["generate", "--task", "PROJ-1"]) == code
        assert "Error occurred" in capsys.readouterr().out

    def test_interrupt_exits_130(self):
        with patch("tmplgen.cli.load_settings", return_value=READY), \
                patch("tmplgen.cli.generate", side_effect=KeyboardInterrupt):
            assert cli.run(["generate", "--task", "PROJ-1"]) == 130

    def test_wires_pipeline(self):
        with patch("tmplgen.cli.load_settings", return_value=READY), \
                patch("tmplgen.cli.get_jira_client") as get_jira, \
                patch("tmplgen.cli.GeminiBackend") as gemini, \
                patch("tmplgen.cli.AnthropicBackend") as claude, \
                patch("tmplgen.cli.run_pipeline") as pipeline:
            assert cli.run(["generate", "-t", "PROJ-123", "--output-dir", "out"]) == 0

        get_jira.assert_called_once_with(READY)
        gemini.from_settings.assert_called_once_with(READY)
        claude.from_settings.assert_called_once_with(READY)
        args, kwargs = pipeline.call_args
        assert args == ("PROJ-123", False)
        assert kwargs["output_dir"] == "out"
        assert kwargs["analyzer"].backend is gemini.from_settings.return_value
        assert kwargs["generator"].backend is claude.from_settings.return_value

    def test_publisher_factory_uses_workspace(self, tmp_path):
        settings = Settings(**{**READY.__dict__, "gitlab_token": "tok", "repo_name": "g/app"})
        with patch("tmplgen.cli.load_settings", return_value=settings), \
                patch("tmplgen.cli.get_jira_client"), \
                patch("tmplgen.cli.GeminiBackend"), \
                patch("tmplgen.cli.AnthropicBackend"), \
                patch("tmplgen.cli.run_pipeline") as pipeline:
            cli.run(["generate", "-t", "PROJ-1", "-c", "--workspace", str(tmp_path / "ws")])

        factory = pipeline.call_args.kwargs["publisher_factory"]
        with patch("tmplgen.cli.RepositoryPublisher") as publisher_cls:
            factory()
        publisher_cls.from_settings.assert_called_once_with(settings, str(tmp_path / "ws"), "templates")
