import unittest

from vc_changelog.config.loader import ConfigError
from vc_changelog.grouping.alias_map import SectionAliasMap
from vc_changelog.vcs.query import QueryError
from vc_changelog.webhooks.validator import (
    CommitStatus,
    PullRequestValidator,
    StatusError,
    ValidationResult,
    validate_pull_request,
)


GOOD = [("a" * 40, "feat(ui): add button"), ("b" * 40, "fix(core): crash\n\nCloses #3")]
BAD = GOOD + [("c" * 40, "updated stuff")]


class TestValidatePullRequest(unittest.TestCase):
    def test_all_commits_well_formed(self) -> None:
        self.assertIs(validate_pull_request(GOOD, 2), ValidationResult.VALID)

    def test_malformed_commit_is_invalid(self) -> None:
        self.assertIs(validate_pull_request(BAD, 3), ValidationResult.INVALID)

    def test_unknown_type_is_invalid(self) -> None:
        commits = [("a" * 40, "docs(readme): typo")]
        self.assertIs(validate_pull_request(commits, 1), ValidationResult.INVALID)

    def test_repository_sections_are_accepted(self) -> None:
        commits = [("a" * 40, "docs(readme): typo")]
        alias_map = SectionAliasMap.default().merge({"Documentation": ["docs"]})
        self.assertIs(validate_pull_request(commits, 1, alias_map), ValidationResult.VALID)

    def test_no_commits_is_error(self) -> None:
        self.assertIs(validate_pull_request([], 0), ValidationResult.ERROR)


class RecordingSink:
    def __init__(self, fail_on=()):
        self.posted = []
        self.fail_on = set(fail_on)

    def __call__(self, sha, status):
        if status in self.fail_on:
            raise StatusError(f"cannot post {status.value}")
        self.posted.append((sha, status))


class TestPullRequestValidator(unittest.TestCase):
    def test_success_posts_pending_then_success(self) -> None:
        sink = RecordingSink()
        result = PullRequestValidator(sink).run("head", 2, lambda: GOOD)
        self.assertIs(result, ValidationResult.VALID)
        self.assertEqual(sink.posted, [("head", CommitStatus.PENDING), ("head", CommitStatus.SUCCESS)])

    def test_failure_status(self) -> None:
        sink = RecordingSink()
        result = PullRequestValidator(sink).run("head", 3, lambda: BAD)
        self.assertIs(result, ValidationResult.INVALID)
        self.assertEqual(sink.posted[-1], ("head", CommitStatus.FAILURE))

    def test_retrieval_error_posts_error(self) -> None:
        def broken():
            raise QueryError("API down")

        sink = RecordingSink()
        result = PullRequestValidator(sink).run("head", 1, broken)
        self.assertIs(result, ValidationResult.ERROR)
        self.assertEqual(sink.posted, [("head", CommitStatus.PENDING), ("head", CommitStatus.ERROR)])

    def test_config_error_posts_error(self) -> None:
        def bad_config():
            raise ConfigError("invalid TOML")

        sink = RecordingSink()
        result = PullRequestValidator(sink).run("head", 2, lambda: GOOD, bad_config)
        self.assertIs(result, ValidationResult.ERROR)
        self.assertEqual(sink.posted[-1], ("head", CommitStatus.ERROR))

    def test_unexpected_retrieval_failure_posts_error(self) -> None:
        def malformed_payload():
            raise KeyError("commit")

        sink = RecordingSink()
        result = PullRequestValidator(sink).run("head", 1, malformed_payload)
        self.assertIs(result, ValidationResult.ERROR)
        self.assertEqual(sink.posted, [("head", CommitStatus.PENDING), ("head", CommitStatus.ERROR)])

    def test_invalid_tag_pattern_posts_error(self) -> None:
        alias_map = SectionAliasMap.default().merge({"Fixes": ["fix("]})
        sink = RecordingSink()
        result = PullRequestValidator(sink).run("head", 2, lambda: GOOD, lambda: alias_map)
        self.assertIs(result, ValidationResult.ERROR)
        self.assertEqual(sink.posted[-1], ("head", CommitStatus.ERROR))

    def test_pending_failure_aborts(self) -> None:
        calls = []
        sink = RecordingSink(fail_on=[CommitStatus.PENDING])
        result = PullRequestValidator(sink).run("head", 2, lambda: calls.append(1) or GOOD)
        self.assertIs(result, ValidationResult.ERROR)
        self.assertEqual(calls, [])
        self.assertEqual(sink.posted, [("head", CommitStatus.ERROR)])

    def test_final_post_failure_is_error(self) -> None:
        sink = RecordingSink(fail_on=[CommitStatus.SUCCESS])
        self.assertIs(PullRequestValidator(sink).run("head", 2, lambda: GOOD), ValidationResult.ERROR)


def test_status_descriptions():
    assert CommitStatus.PENDING.description == "beginning commit format validation"
    assert CommitStatus.SUCCESS.description == "commit looks good"
    assert CommitStatus.FAILURE.description == "commit was improperly formatted"
    assert CommitStatus.ERROR.description == "there was a problem validating commit format"


if __name__ == "__main__":
    unittest.main()
