"""Reconcilers and the sync driver."""

from bulkrepo.services.autolinks import AutolinkReconciler
from bulkrepo.services.file_sync import FileSyncEngine
from bulkrepo.services.package_json import PackageJsonReconciler
from bulkrepo.services.rulesets import RulesetReconciler
from bulkrepo.services.runner import SyncRunner
from bulkrepo.services.settings import SettingsReconciler
from bulkrepo.services.summary import render_summary, results_to_json

__all__ = [
    "AutolinkReconciler",
    "FileSyncEngine",
    "PackageJsonReconciler",
    "RulesetReconciler",
    "SettingsReconciler",
    "SyncRunner",
    "render_summary",
    "results_to_json",
]
