"""Unit tests for RepositoryInitializer (projinit.provisioners.repository).

Tests cover:
- No options: skipped, no git calls
- git init with and without an initial branch
- Identity: name only, email only, both (local scope, name first)
- Remote registration
- Fail-fast: init failure stops identity and remote
- config_failed and remote_add_failed classification
- Missing git binary
"""

from __future__ import annotations

import pytest

from projinit.models import FailureKind, RemoteSpec, RepositoryOptions, StepStatus
from projinit.provisioners.repository import RepositoryInitializer
from projinit.runner import ExecutionContext


def _substep_status(result, name: str):
    for sub in result.substeps:
        if sub.step == name:
            return sub.status
    return None


class TestInitializeSkipped:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_options_skipped(self, context: ExecutionContext, fake_runner, test_config):
        result = await RepositoryInitializer(test_config).initialize(context, None)

        assert result.status == StepStatus.SKIPPED
        assert result.step == "repository"
        assert fake_runner.calls == []


class TestInit:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bare_init_uses_tool_default_branch(self, context: ExecutionContext, fake_runner, test_config):
        result = await RepositoryInitializer(test_config).initialize(context, RepositoryOptions())

        assert result.status == StepStatus.SUCCESS
        assert fake_runner.git_calls() == [("init",)]
        assert _substep_status(result, "init") == StepStatus.SUCCESS
        assert _substep_status(result, "identity") == StepStatus.SKIPPED
        assert _substep_status(result, "remote") == StepStatus.SKIPPED

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_init_with_branch(self, context: ExecutionContext, fake_runner, test_config):
        await RepositoryInitializer(test_config).initialize(context, RepositoryOptions(branch="trunk"))
        assert fake_runner.git_calls()[0] == ("init", "--initial-branch", "trunk")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_runs_inside_project(self, context: ExecutionContext, fake_runner, test_config):
        await RepositoryInitializer(test_config).initialize(context, RepositoryOptions())
        assert all(cwd == context.working_dir for _, _, cwd in fake_runner.calls)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_init_failure_stops_everything(self, context: ExecutionContext, fake_runner, test_config):
        fake_runner.program("git", "init", exit_code=128, stderr="fatal: cannot mkdir .git")
        options = RepositoryOptions(
            user_name="Alice",
            user_email="alice@example.com",
            remote=RemoteSpec(name="origin", url="git@example.com:alice/demo.git"),
        )

        result = await RepositoryInitializer(test_config).initialize(context, options)

        assert result.status == StepStatus.FAILED
        assert result.failure == FailureKind.SUBPROCESS_FAILED
        assert result.exit_code == 128
        assert "cannot mkdir" in result.stderr
        assert result.detail.startswith("init:")
        assert len(fake_runner.calls) == 1
        assert [sub.step for sub in result.substeps] == ["init"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_detail_names_git_subcommand_only(self, context: ExecutionContext, fake_runner, test_config):
        fake_runner.program("git", "init", exit_code=128)

        result = await RepositoryInitializer(test_config).initialize(
            context, RepositoryOptions(branch="main")
        )

        assert result.substeps[0].detail == "git init exited with 128"
        assert result.detail == "init: git init exited with 128"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_git_is_tool_not_found(self, context: ExecutionContext, fake_runner, test_config):
        fake_runner.missing.add("git")

        result = await RepositoryInitializer(test_config).initialize(
            context, RepositoryOptions(user_name="Alice")
        )

        assert result.failure == FailureKind.TOOL_NOT_FOUND
        assert len(fake_runner.calls) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_init_timeout(self, context: ExecutionContext, fake_runner, test_config):
        fake_runner.program("git", "init", exit_code=-1, timed_out=True)

        result = await RepositoryInitializer(test_config).initialize(context, RepositoryOptions())

        assert result.failure == FailureKind.SUBPROCESS_FAILED
        assert "timeout" in result.detail


class TestIdentity:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_name_only(self, context: ExecutionContext, fake_runner, test_config):
        await RepositoryInitializer(test_config).initialize(context, RepositoryOptions(user_name="Alice"))

        assert fake_runner.git_calls() == [
            ("init",),
            ("config", "--local", "user.name", "Alice"),
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_email_only(self, context: ExecutionContext, fake_runner, test_config):
        await RepositoryInitializer(test_config).initialize(
            context, RepositoryOptions(user_email="alice@example.com")
        )

        assert fake_runner.git_calls() == [
            ("init",),
            ("config", "--local", "user.email", "alice@example.com"),
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_name_and_email_in_order(self, context: ExecutionContext, fake_runner, test_config):
        result = await RepositoryInitializer(test_config).initialize(
            context, RepositoryOptions(user_name="Alice", user_email="alice@example.com")
        )

        assert fake_runner.git_calls()[1:] == [
            ("config", "--local", "user.name", "Alice"),
            ("config", "--local", "user.email", "alice@example.com"),
        ]
        assert result.substeps[1].detail == "user.name, user.email"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_config_failure(self, context: ExecutionContext, fake_runner, test_config):
        fake_runner.program("git", "config", exit_code=255, stderr="error: could not lock config file")
        options = RepositoryOptions(
            user_name="Alice",
            user_email="alice@example.com",
            remote=RemoteSpec(name="origin", url="https://example.com/demo.git"),
        )

        result = await RepositoryInitializer(test_config).initialize(context, options)

        assert result.failure == FailureKind.CONFIG_FAILED
        assert "could not lock" in result.stderr
        # Stops at the first config write; remote never attempted.
        assert fake_runner.git_calls() == [
            ("init",),
            ("config", "--local", "user.name", "Alice"),
        ]
        assert [sub.step for sub in result.substeps] == ["init", "identity"]


class TestRemote:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_remote_added_after_identity(self, context: ExecutionContext, fake_runner, test_config):
        options = RepositoryOptions(
            user_name="Alice",
            remote=RemoteSpec(name="upstream", url="https://example.com/demo.git"),
        )

        result = await RepositoryInitializer(test_config).initialize(context, options)

        assert result.status == StepStatus.SUCCESS
        assert fake_runner.git_calls()[-1] == ("remote", "add", "upstream", "https://example.com/demo.git")
        assert _substep_status(result, "remote") == StepStatus.SUCCESS

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_remote_add_failure(self, context: ExecutionContext, fake_runner, test_config):
        fake_runner.program("git", "remote", exit_code=3, stderr="error: remote origin already exists.")
        options = RepositoryOptions(remote=RemoteSpec(name="origin", url="https://example.com/demo.git"))

        result = await RepositoryInitializer(test_config).initialize(context, options)

        assert result.status == StepStatus.FAILED
        assert result.failure == FailureKind.REMOTE_ADD_FAILED
        assert result.exit_code == 3
        assert "already exists" in result.stderr
        assert _substep_status(result, "init") == StepStatus.SUCCESS
        assert _substep_status(result, "identity") == StepStatus.SKIPPED
