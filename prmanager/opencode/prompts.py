"""Prompt text handed to the AI agent when a review chat starts."""

from __future__ import annotations

from prmanager.comments import group_comments_by_file
from prmanager.models import PullRequestDetail, ReviewComment

HELP_SECTION = """---

## How I can help
- Review the code changes and suggest improvements
- Explain complex code sections
- Check for potential bugs or security issues
- Suggest test cases
- Help with code formatting and best practices

Use `@` to reference specific files from this PR for detailed analysis."""


def _details_section(pr: PullRequestDetail) -> list[str]:
    lines = [
        "## PR Details",
        f"- **Title:** {pr.title}",
        f"- **Author:** @{pr.author.login}",
        f"- **Status:** {pr.state}",
        f"- **Branch:** {pr.head_ref_name} → {pr.base_ref_name}",
    ]
    if pr.labels:
        lines.append(f"- **Labels:** {', '.join(label.name for label in pr.labels)}")
    if pr.is_draft:
        lines.append("- **Draft:** Yes")
    lines.append("")
    return lines


def _files_section(pr: PullRequestDetail) -> list[str]:
    if not pr.files:
        return []
    additions = sum(f.additions for f in pr.files)
    deletions = sum(f.deletions for f in pr.files)
    lines = [
        "## Changed Files",
        f"{len(pr.files)} files changed, +{additions} additions, -{deletions} deletions",
        "",
    ]
    lines.extend(f"- `{f.filename}` (+{f.additions}, -{f.deletions})" for f in pr.files)
    lines.append("")
    return lines


def _comments_section(comments: list[ReviewComment]) -> list[str]:
    if not comments:
        return []
    lines = ["## Review Comments", f"{len(comments)} comments", ""]
    for path, file_comments in group_comments_by_file(comments).items():
        lines.append(f"### {path}")
        for comment in file_comments:
            location = f":{comment.line}" if comment.line else ""
            first_line = comment.body.split("\n", 1)[0]
            lines.append(f"**@{comment.author.login}{location}:** {first_line}")
            if comment.diff_hunk:
                lines.extend(["```diff", comment.diff_hunk.strip(), "```"])
        lines.append("")
    return lines


def build_context_prompt(pr: PullRequestDetail, comments: list[ReviewComment]) -> str:
    """Render PR metadata, changed files and review comments as markdown."""
    lines = [f"# Code Review Assistance for PR #{pr.number}", ""]
    lines.extend(_details_section(pr))
    if pr.body.strip():
        lines.extend(["## Description", pr.body.strip(), ""])
    lines.extend(_files_section(pr))
    lines.extend(_comments_section(comments))
    lines.append(HELP_SECTION)
    return "\n".join(lines)
