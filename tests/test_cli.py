import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

import vc_changelog.cli as cli
from vc_changelog.render.markdown import RenderError
from vc_changelog.vcs.query import Querier, QueryError


class DummyQuerier(Querier):
    def __init__(self, commits=None, config=None, origin="https://github.com/skuid/changelog"):
        self.commits = commits if commits is not None else []
        self.config = config
        self.origin = origin
        self.calls = []

    def get_commits(self, from_ref="", to_ref="HEAD"):
        self.calls.append(("get_commits", from_ref, to_ref))
        if isinstance(self.commits, Exception):
            raise self.commits
        return self.commits

    def get_commit_range(self, since, until):
        self.calls.append(("get_commit_range", since, until))
        return self.commits

    def get_origin(self):
        return self.origin

    def get_latest_commit(self):
        return "cafebabe"

    def get_latest_tag(self):
        return "deadbeef"

    def get_latest_tag_version(self):
        return "v1.0.0"

    def get_config(self):
        if isinstance(self.config, Exception):
            raise self.config
        return self.config


COMMITS = [
    ("029aafdc7579af19b3ce6acf0ce245a230633953", "feat(README): Initial Commit"),
    ("1234567890abcdef1234567890abcdef12345678", "fix(core): crash\n\nCloses #9"),
]


class TestGenerate(unittest.TestCase):
    def invoke(self, querier, args, **kwargs):
        runner = CliRunner()
        with patch.object(cli, "create_querier", return_value=querier) as factory:
            result = runner.invoke(cli.main, ["generate"] + args, **kwargs)
        self.factory = factory
        return result

    def test_writes_changelog_to_stdout(self) -> None:
        querier = DummyQuerier(commits=COMMITS)
        result = self.invoke(querier, ["--version", "1.0.0"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('<a name="1.0.0"></a>', result.output)
        self.assertIn("### Features", result.output)
        self.assertIn(
            "* **README:** Initial Commit ([029aafdc](https://github.com/skuid/changelog/commit/"
            "029aafdc7579af19b3ce6acf0ce245a230633953))",
            result.output,
        )
        self.assertIn("closes [#9](https://github.com/skuid/changelog/issues/9)", result.output)
        self.assertEqual(querier.calls, [("get_commits", "", "HEAD")])

    def test_writes_changelog_file(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            with patch.object(cli, "create_querier", return_value=DummyQuerier(commits=COMMITS)):
                result = runner.invoke(cli.main, ["generate", "-v", "1.0.0", "--changelog", "CHANGELOG.md"])
            self.assertEqual(result.exit_code, 0, result.output)
            content = Path("CHANGELOG.md").read_text(encoding="utf-8")
        self.assertTrue(content.startswith('<a name="1.0.0"></a>\n## 1.0.0 ('))
        self.assertIn("Wrote changelog to CHANGELOG.md", result.output)

    def test_config_supplies_header_and_sections(self) -> None:
        config = (
            b'repo = "https://gitlab.com/skuid/changelog"\n'
            b'version = "2.0.0"\n'
            b'subtitle = "Codename"\n'
            b"patch_ver = true\n"
            b'[sections]\n"Documentation" = ["docs"]\n'
        )
        querier = DummyQuerier(commits=COMMITS + [("abcdef0123456789", "docs(api): explain")], config=config)
        result = self.invoke(querier, [])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("### 2.0.0 Codename (", result.output)
        self.assertIn("### Documentation", result.output)
        self.assertIn("https://gitlab.com/skuid/changelog/commit/", result.output)

    def test_flags_override_config(self) -> None:
        config = b'repo = "https://gitlab.com/skuid/changelog"\nversion = "2.0.0"\n'
        querier = DummyQuerier(commits=COMMITS, config=config)
        result = self.invoke(
            querier,
            ["--version", "3.0.0", "--repo", "https://git.example.com/r", "--link-style", "cgit"],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("## 3.0.0 (", result.output)
        self.assertIn("https://git.example.com/r/commit/?id=029aafdc", result.output)

    def test_from_latest_tag(self) -> None:
        querier = DummyQuerier(commits=COMMITS)
        result = self.invoke(querier, ["--from-latest-tag", "--to", "main"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(querier.calls, [("get_commits", "deadbeef", "main")])

    def test_time_range_takes_precedence(self) -> None:
        querier = DummyQuerier(commits=COMMITS)
        result = self.invoke(querier, ["--from", "v1", "--since", "2017-08-01T00:00:00Z"])
        self.assertEqual(result.exit_code, 0, result.output)
        name, since, until = querier.calls[0]
        self.assertEqual(name, "get_commit_range")
        self.assertEqual(since.isoformat(), "2017-08-01T00:00:00+00:00")
        self.assertIsNotNone(until.tzinfo)

    def test_invalid_timestamp(self) -> None:
        result = self.invoke(DummyQuerier(), ["--since", "yesterday"])
        self.assertEqual(result.exit_code, 2)

    def test_include_all(self) -> None:
        querier = DummyQuerier(commits=COMMITS + [("abcdef0123456789", "chore(deps): bump")])
        result = self.invoke(querier, ["--include-all"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("### Chore", result.output)

    def test_github_provider_requires_repo(self) -> None:
        result = self.invoke(DummyQuerier(), ["--provider", "github"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)
        self.assertIn("--repo is required", result.output)

    def test_github_provider_arguments(self) -> None:
        result = self.invoke(
            DummyQuerier(commits=COMMITS),
            ["-p", "github", "-r", "https://github.com/skuid/changelog", "--token", "abc"],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        args, kwargs = self.factory.call_args
        self.assertEqual(args[0], cli.Provider.GITHUB)
        self.assertEqual(kwargs["repo"], "https://github.com/skuid/changelog")
        self.assertEqual(kwargs["token"], "abc")

    def test_config_error(self) -> None:
        result = self.invoke(DummyQuerier(config=b"sections = ["), [])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("Configuration error", result.output)

    def test_unreadable_config_is_ignored(self) -> None:
        result = self.invoke(DummyQuerier(commits=COMMITS, config=QueryError("denied")), [])
        self.assertEqual(result.exit_code, 0, result.output)

    def test_query_failure(self) -> None:
        result = self.invoke(DummyQuerier(commits=QueryError("bad revision")), [])
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)
        self.assertIn("Could not get list of commits", result.output)

    def test_render_failure(self) -> None:
        with patch.object(cli, "build_changelog", side_effect=RenderError("broken template")):
            result = self.invoke(DummyQuerier(commits=COMMITS), [])
        self.assertEqual(result.exit_code, cli.EXIT_RENDER_FAILURE)
        self.assertIn("broken template", result.output)

    def test_render_failure_leaves_changelog_file_untouched(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("CHANGELOG.md").write_text("previous release\n", encoding="utf-8")
            with patch.object(cli, "create_querier", return_value=DummyQuerier(commits=COMMITS)):
                with patch.object(cli, "build_changelog", side_effect=RenderError("broken template")):
                    result = runner.invoke(cli.main, ["generate", "--changelog", "CHANGELOG.md"])
            content = Path("CHANGELOG.md").read_text(encoding="utf-8")
        self.assertEqual(result.exit_code, cli.EXIT_RENDER_FAILURE)
        self.assertEqual(content, "previous release\n")

    def test_unexpected_error(self) -> None:
        runner = CliRunner()
        with patch.object(cli, "create_querier", side_effect=RuntimeError("kaboom")):
            result = runner.invoke(cli.main, ["generate"])
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)
        self.assertIn("Unexpected error: kaboom", result.output)

    def test_options_from_environment(self) -> None:
        result = self.invoke(DummyQuerier(commits=COMMITS), [], env={"CHANGELOG_GENERATE_VERSION": "4.0.0"})
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("## 4.0.0 (", result.output)


def test_serve_starts_webhook_server():
    runner = CliRunner()
    with patch.object(cli, "serve_webhook") as serve:
        result = runner.invoke(cli.main, ["serve", "-s", "secret", "--token", "t", "-n", "8080"])
    assert result.exit_code == 0, result.output
    serve.assert_called_once_with("secret", "t", host="0.0.0.0", port=8080)


def test_serve_without_secret_logs_warning():
    runner = CliRunner()
    with patch.object(cli, "serve_webhook"):
        result = runner.invoke(cli.main, ["serve"])
    assert result.exit_code == 0, result.output
    assert "WARNING: No webhook secret set" in result.output


def test_version_option():
    result = CliRunner().invoke(cli.main, ["--version"])
    assert result.exit_code == 0
    assert cli.__version__ in result.output


if __name__ == "__main__":
    unittest.main()
