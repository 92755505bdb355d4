"""End-to-end tests for the agent-os command line."""

import pytest
from click.testing import CliRunner

from agent_os_cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path):
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    return project_dir


def run_install(runner, tree, project, *args, **kwargs):
    return runner.invoke(
        cli,
        ["install", "--base-dir", str(tree.base_dir), "--project-dir", str(project), *args],
        **kwargs,
    )


class TestInstallCommand:
    def test_installs_with_base_defaults(self, runner, installable_tree, project):
        result = run_install(runner, installable_tree, project)

        assert result.exit_code == 0, result.output
        assert "successfully installed" in result.output
        assert "Installed 2 standards" in result.output
        assert (project / ".claude/commands/agent-os/plan-product.md").is_file()
        assert (project / ".claude/skills/frontend-css/SKILL.md").is_file()

    def test_underscore_flags_are_accepted(self, runner, installable_tree, project):
        result = run_install(runner, installable_tree, project, "--use_claude_code_subagents", "false")

        assert result.exit_code == 0, result.output
        plan = (project / ".claude/commands/agent-os/plan-product.md").read_text()
        assert "# PHASE 1: Product Concept" in plan
        assert not (project / ".claude/agents/agent-os").exists()

    def test_requires_some_output(self, runner, installable_tree, project):
        result = run_install(
            runner, installable_tree, project, "--claude-code-commands", "false", "--agent-os-commands", "false"
        )

        assert result.exit_code == 1
        assert "must have one of" in result.output
        assert list(project.iterdir()) == []

    def test_unknown_profile(self, runner, installable_tree, project):
        result = run_install(runner, installable_tree, project, "--profile", "missing")

        assert result.exit_code == 1
        assert "Profile not found" in result.output

    def test_missing_base_installation(self, runner, tmp_path, project):
        result = runner.invoke(
            cli, ["install", "--base-dir", str(tmp_path / "nowhere"), "--project-dir", str(project)]
        )

        assert result.exit_code == 1
        assert "base installation not found" in result.output

    def test_dry_run_writes_nothing(self, runner, installable_tree, project):
        result = run_install(runner, installable_tree, project, "--dry-run")

        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert "would be created" in result.output
        assert "agent-os/config.yml" in result.output
        assert list(project.iterdir()) == []

    def test_reinstall_replaces_installation(self, runner, installable_tree, project):
        assert run_install(runner, installable_tree, project).exit_code == 0
        stray = project / ".claude/commands/agent-os/stray.md"
        stray.write_text("# Left over\n")

        result = run_install(runner, installable_tree, project, "--re-install", "-y")

        assert result.exit_code == 0, result.output
        assert not stray.exists()
        assert (project / ".claude/commands/agent-os/plan-product.md").is_file()
        assert not any(p.name.startswith(".agent-os-reinstall-backup.") for p in project.iterdir())

    def test_reinstall_can_be_declined(self, runner, installable_tree, project):
        assert run_install(runner, installable_tree, project).exit_code == 0
        stray = project / ".claude/commands/agent-os/stray.md"
        stray.write_text("# Left over\n")

        result = run_install(runner, installable_tree, project, "--re_install", input="n\n")

        assert result.exit_code == 0
        assert "Re-installation cancelled" in result.output
        assert stray.exists()

    def test_update_keeps_unmanaged_files(self, runner, installable_tree, project):
        assert run_install(runner, installable_tree, project).exit_code == 0
        stray = project / ".claude/commands/agent-os/stray.md"
        stray.write_text("# Left over\n")

        result = run_install(runner, installable_tree, project)

        assert result.exit_code == 0, result.output
        assert "Updating existing installation" in result.output
        assert stray.exists()


    def test_update_keeps_edits_unless_overwrite_requested(self, runner, installable_tree, project):
        assert run_install(runner, installable_tree, project).exit_code == 0
        standard = project / "agent-os/standards/global/tech-stack.md"
        standard.write_text("MY CUSTOM EDIT\n")

        result = run_install(runner, installable_tree, project)
        assert result.exit_code == 0, result.output
        assert "Kept" in result.output
        assert standard.read_text() == "MY CUSTOM EDIT\n"

        result = run_install(runner, installable_tree, project, "--overwrite_standards")
        assert result.exit_code == 0, result.output
        assert standard.read_text() == "# Tech stack\n"


class TestCompileCommand:
    def test_compiles_profile_document(self, runner, installable_tree, tmp_path):
        destination = tmp_path / "out" / "plan-product.md"

        result = runner.invoke(
            cli,
            [
                "compile",
                "commands/plan-product/single-agent/plan-product.md",
                str(destination),
                "--embed-phases",
                "--base-dir",
                str(installable_tree.base_dir),
            ],
        )

        assert result.exit_code == 0, result.output
        assert destination.read_text() == "# Plan Product\n# PHASE 1: Product Concept\n\nDefine the concept.\n"

    def test_dry_run_prints_content(self, runner, installable_tree, tmp_path):
        destination = tmp_path / "planner.md"

        result = runner.invoke(
            cli,
            [
                "compile",
                "agents/product-planner.md",
                str(destination),
                "--dry-run",
                "--base-dir",
                str(installable_tree.base_dir),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Gather the requirements." in result.output
        assert not destination.exists()

    def test_role_file(self, runner, installable_tree, tmp_path):
        role_file = tmp_path / "roles.txt"
        role_file.write_text("<<<role_description>>>\nYou own the API.\n<<<END>>>\n")
        destination = tmp_path / "role.md"

        result = runner.invoke(
            cli,
            [
                "compile",
                "agents/templates/role.md",
                str(destination),
                "--role-file",
                str(role_file),
                "--base-dir",
                str(installable_tree.base_dir),
            ],
        )

        assert result.exit_code == 0, result.output
        assert destination.read_text() == "You own the API.\n"

    def test_missing_source(self, runner, installable_tree, tmp_path):
        result = runner.invoke(
            cli, ["compile", "commands/nope.md", str(tmp_path / "x.md"), "--base-dir", str(installable_tree.base_dir)]
        )

        assert result.exit_code == 1
        assert "Cannot find" in result.output


class TestProfileCommands:
    def test_create_list_and_show(self, runner, installable_tree):
        base = str(installable_tree.base_dir)

        created = runner.invoke(cli, ["profile", "--base-dir", base, "create", "rails", "--inherit-from", "default"])
        assert created.exit_code == 0, created.output
        assert "Profile 'rails' created" in created.output
        assert (installable_tree.profiles_dir / "rails/profile-config.yml").is_file()

        listed = runner.invoke(cli, ["profile", "--base-dir", base, "list"])
        assert listed.exit_code == 0, listed.output
        assert "default" in listed.output
        assert "rails" in listed.output

        shown = runner.invoke(cli, ["profile", "--base-dir", base, "show", "rails"])
        assert shown.exit_code == 0, shown.output
        assert "rails -> default" in shown.output

    def test_create_rejects_reserved_name(self, runner, installable_tree):
        result = runner.invoke(cli, ["profile", "--base-dir", str(installable_tree.base_dir), "create", "_system"])

        assert result.exit_code == 1
        assert "reserved" in result.output

    def test_show_unknown_profile(self, runner, installable_tree):
        result = runner.invoke(cli, ["profile", "--base-dir", str(installable_tree.base_dir), "show", "ghost"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestStatusCommand:
    def test_not_installed(self, runner, installable_tree, project):
        result = runner.invoke(
            cli, ["status", "--base-dir", str(installable_tree.base_dir), "--project-dir", str(project)]
        )

        assert result.exit_code == 0
        assert "not installed" in result.output

    def test_up_to_date_then_drifted(self, runner, installable_tree, project):
        assert run_install(runner, installable_tree, project).exit_code == 0
        status_args = ["status", "--base-dir", str(installable_tree.base_dir), "--project-dir", str(project)]

        result = runner.invoke(cli, status_args)
        assert result.exit_code == 0, result.output
        assert "up to date" in result.output

        (installable_tree.base_dir / "config.yml").write_text("version: 2.1.0\nlazy_load_workflows: true\n")
        result = runner.invoke(cli, status_args)
        assert result.exit_code == 0, result.output
        assert "Re-run" in result.output
