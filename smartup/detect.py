"""Package manager detection for Node.js projects."""

from pathlib import Path

# Checked in order; the first lock file found wins.
LOCK_FILES = [
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("bun.lockb", "bun"),
]

INSTALL_COMMANDS = {
    "npm": ["npm", "install"],
    "yarn": ["yarn"],
    "pnpm": ["pnpm", "install"],
    "bun": ["bun", "install"],
}


def identify(project_dir: Path) -> str:
    """Detect the package manager from lock files.

    Args:
        project_dir: Directory containing package.json

    Returns:
        Detected manager: 'yarn', 'pnpm', 'bun', or 'npm' when no lock file
        of another manager is present
    """
    for lock_file, manager in LOCK_FILES:
        if (project_dir / lock_file).exists():
            return manager
    return "npm"


def install_command(manager: str) -> list[str]:
    """Return the install command line for a package manager."""
    try:
        return list(INSTALL_COMMANDS[manager])
    except KeyError:
        raise ValueError(f"Unsupported package manager: {manager}") from None
