"""Unit tests for multipr exceptions module."""

import pytest

from multipr.exceptions import (
    ConfigurationError,
    CycleDetectedError,
    DuplicateNameError,
    GitError,
    HostingError,
    MultiPRError,
    PipelineStepError,
    StateError,
    ToolingUnavailableError,
    UnknownBucketError,
    UnknownFileError,
    UnsupportedHostError,
    ValidationError,
)


class TestMultiPRError:
    """Tests for base MultiPRError."""

    @pytest.mark.smoke
    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = MultiPRError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {}

    @pytest.mark.smoke
    def test_error_with_details(self) -> None:
        """Test details are carried and rendered."""
        error = MultiPRError("Error", details={"key": "value"})
        assert error.details == {"key": "value"}
        assert "key" in str(error)

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            ValidationError("bad"),
            CycleDetectedError(["a", "b"], closing_bucket="b"),
            GitError("bad"),
            HostingError("bad"),
            ToolingUnavailableError("bad", tool="gh"),
            UnsupportedHostError(None),
            PipelineStepError("bad", step="push", bucket="a"),
            StateError("bad"),
        ],
    )
    def test_all_errors_share_base(self, error: MultiPRError) -> None:
        """Every error can be caught as MultiPRError."""
        assert isinstance(error, MultiPRError)


class TestValidationErrors:
    """Tests for input validation errors."""

    def test_duplicate_name(self) -> None:
        error = DuplicateNameError("api")
        assert isinstance(error, ValidationError)
        assert error.field == "name"
        assert "api" in error.message

    def test_unknown_bucket(self) -> None:
        error = UnknownBucketError("ghost")
        assert isinstance(error, ValidationError)
        assert error.name == "ghost"

    def test_unknown_file(self) -> None:
        error = UnknownFileError("nope.py")
        assert isinstance(error, ValidationError)
        assert error.path == "nope.py"


class TestDomainErrors:
    """Tests for errors carrying structured context."""

    def test_cycle_message_closes_loop(self) -> None:
        error = CycleDetectedError(["a", "b", "c"], closing_bucket="c")
        assert error.message == "Circular dependency: a -> b -> c -> a"
        assert error.closing_bucket == "c"

    def test_git_error_fields(self) -> None:
        error = GitError("push rejected", command="git push", exit_code=1)
        assert error.command == "git push"
        assert error.exit_code == 1

    def test_tooling_hint(self) -> None:
        error = ToolingUnavailableError("GitHub CLI not found", tool="gh", hint="Install it")
        assert error.hint == "Install it"
        assert error.details["tool"] == "gh"

    def test_unsupported_host_message(self) -> None:
        error = UnsupportedHostError("https://gitlab.com/a/b.git")
        assert error.message == "Unsupported repository type. Only GitHub and Bitbucket are supported."
        assert error.remote_url == "https://gitlab.com/a/b.git"
