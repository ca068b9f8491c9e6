"""Run summary rendering.

Turns the per-repository results into a markdown report and a JSON
document for automation.
"""

import json
from collections.abc import Sequence

from bulkrepo.models.results import RepositoryResult, SettingsResult

SUMMARY_HEADING = "Bulk Repository Settings Update Results"


def _settings_details(settings: SettingsResult) -> list[str]:
    details = []
    if settings.access_denied:
        details.append("access denied")
    if settings.insufficient_permissions:
        details.append("insufficient permissions")
    if settings.changes:
        details.append(f"{len(settings.changes)} setting(s) changed")
    if settings.topics_added or settings.topics_removed:
        details.append(
            f"topics +{len(settings.topics_added)}/-{len(settings.topics_removed)}"
        )
    if settings.code_scanning:
        details.append(f"code scanning {settings.code_scanning}")
    for name, toggle in settings.toggles.items():
        if toggle.status != "unchanged":
            details.append(f"{name} {toggle.status}")
    for name, warning in settings.warnings.items():
        details.append(f"warning ({name}): {warning}")
    return details


def describe(result: RepositoryResult) -> str:
    """One-line description of what happened to a repository."""
    if not result.success:
        return "; ".join(result.errors)

    details = []
    if result.settings is not None:
        details.extend(_settings_details(result.settings))
    for key, file_result in result.files.items():
        if file_result.changed:
            entry = f"{key} {file_result.status}"
            if file_result.pr_number is not None:
                entry += f" (#{file_result.pr_number})"
            details.append(entry)
    if result.ruleset is not None:
        ruleset = result.ruleset
        if ruleset.status and ruleset.status != "unchanged":
            details.append(f"ruleset '{ruleset.name}' {ruleset.status}")
        if ruleset.deleted:
            details.append(f"deleted rulesets: {', '.join(ruleset.deleted)}")
        if ruleset.would_delete:
            details.append(f"would delete rulesets: {', '.join(ruleset.would_delete)}")
        for name, error in ruleset.delete_errors.items():
            details.append(f"could not delete ruleset '{name}': {error}")
    if result.autolinks is not None and result.autolinks.changed:
        details.append(f"autolinks {result.autolinks.status}")

    return "; ".join(details) if details else "No changes"


def _status(result: RepositoryResult) -> str:
    if not result.success:
        return "Failed"
    if result.changed:
        return "Would change" if result.dry_run else "Changed"
    return "Unchanged"


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_summary(results: Sequence[RepositoryResult], dry_run: bool = False) -> str:
    """Render the markdown summary: heading, totals, then one row per repository."""
    total = len(results)
    successful = sum(1 for r in results if r.success)
    changed = sum(1 for r in results if r.success and r.changed)

    lines = [f"# {SUMMARY_HEADING}", ""]
    if dry_run:
        lines += ["**Dry run:** no changes were applied.", ""]
    lines += [
        f"- **Total repositories:** {total}",
        f"- **Successful:** {successful}",
        f"- **Failed:** {total - successful}",
        f"- **{'Would change' if dry_run else 'Changed'}:** {changed}",
        "",
        "| Repository | Status | Details |",
        "| --- | --- | --- |",
    ]
    for result in results:
        lines.append(
            f"| {_cell(result.repository)} | {_status(result)} | {_cell(describe(result))} |"
        )
    return "\n".join(lines) + "\n"


def results_to_json(results: Sequence[RepositoryResult]) -> str:
    """Serialize results, using ``from``/``to`` for change records."""
    return json.dumps(
        [r.model_dump(mode="json", by_alias=True) for r in results],
        indent=2,
    )
