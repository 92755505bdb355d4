"""Shared fixtures for Agent OS CLI tests."""

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from agent_os_cli.logging_setup import JsonlHandler
from agent_os_cli.profiles.resolver import ProfileResolver


class ProfileTree:
    """Builds a throwaway base installation with profiles."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.profiles_dir = base_dir / "profiles"
        self.profiles_dir.mkdir(parents=True, exist_ok=True)

    def profile(
        self,
        name: str,
        inherits_from: str | bool = False,
        excludes: tuple[str, ...] = (),
        config: bool = True,
    ) -> Path:
        """Create a profile directory, optionally with a profile-config.yml."""
        directory = self.profiles_dir / name
        directory.mkdir(parents=True, exist_ok=True)
        if config:
            parent = "false" if inherits_from is False else inherits_from
            lines = [f"inherits_from: {parent}"]
            if excludes:
                lines.append("exclude_inherited_files:")
                lines.extend(f"  - {pattern}" for pattern in excludes)
            (directory / "profile-config.yml").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return directory

    def write(self, profile: str, relative_path: str, content: str) -> Path:
        path = self.profiles_dir / profile / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def resolver(self) -> ProfileResolver:
        return ProfileResolver(self.base_dir)


@pytest.fixture
def profile_tree(tmp_path):
    """Empty base installation under a temp directory."""
    return ProfileTree(tmp_path / "agent-os-base")


@pytest.fixture
def installable_tree(profile_tree):
    """A default profile with one of every document kind the installer handles."""
    tree = profile_tree
    tree.profile("default", config=False)
    tree.write("default", "standards/global/tech-stack.md", "# Tech stack\n")
    tree.write("default", "standards/frontend/css.md", "# CSS\n")
    tree.write("default", "workflows/planning/gather-requirements.md", "Gather the requirements.\n")
    tree.write("default", "protocols/verification.md", "Verify.\n")
    tree.write(
        "default",
        "commands/plan-product/multi-agent/plan-product.md",
        "# Plan Product\n"
        "{{IF use_claude_code_subagents}}\n"
        "Delegate to the product-planner subagent.\n"
        "{{ENDIF use_claude_code_subagents}}\n",
    )
    tree.write(
        "default",
        "commands/plan-product/single-agent/plan-product.md",
        "# Plan Product\n{{PHASE 1: @agent-os/commands/plan-product/1-product-concept.md}}\n",
    )
    tree.write(
        "default",
        "commands/plan-product/single-agent/1-product-concept.md",
        "Define the concept.\n"
        "{{UNLESS compiled_single_command}}\n"
        "Standalone only.\n"
        "{{ENDUNLESS compiled_single_command}}\n",
    )
    tree.write("default", "commands/orchestrate-tasks/orchestrate-tasks.md", "# Orchestrate\n")
    tree.write("default", "commands/improve-skills/improve-skills.md", "# Improve skills\n")
    tree.write(
        "default",
        "agents/product-planner.md",
        "---\nname: product-planner\ntools: Write, Read\n---\n{{workflows/planning/gather-requirements}}\n",
    )
    tree.write("default", "agents/templates/role.md", "{{role_description}}\n")
    tree.write(
        "default",
        "claude-code-skill-template.md",
        "---\nname: {{standard_name_humanized_capitalized}}\n---\n"
        "Apply the {{standard_name_humanized}} standard in {{standard_file_path}}.\n",
    )
    return tree


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    """Keep CLI log files out of the working directory and detach handlers afterwards."""
    monkeypatch.setenv("AGENT_OS_LOG_PATH", str(tmp_path / "agent-os.log.jsonl"))
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler | RichHandler):
            root.removeHandler(handler)
