"""Path utilities for phettest."""

from pathlib import Path


def get_resources_dir() -> Path:
    """Get the resources directory path.

    Resources ship inside the package: src/phettest/resources

    Returns:
        Path to the resources directory
    """
    # This file is at src/phettest/utils/paths.py
    return Path(__file__).parent.parent / "resources"


def get_comparison_script() -> Path:
    """Get the bundled script that compares a checkout with its remote default branch."""
    return get_resources_dir() / "same-as-remote-master.sh"
