"""Utilities for phettest."""

from phettest.utils.command_runner import CommandRunner, Runner
from phettest.utils.paths import get_comparison_script, get_resources_dir

__all__ = ["CommandRunner", "Runner", "get_comparison_script", "get_resources_dir"]
