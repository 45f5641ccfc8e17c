"""Path management utilities for starknet-deployments library."""

from pathlib import Path
from typing import Optional, Union


def get_default_build_dir() -> Path:
    """
    Get default directory holding Scarb build output.

    Returns:
        Path to ./contracts/target/dev
    """
    return Path.cwd() / "contracts" / "target" / "dev"


def get_default_manifest_dir() -> Path:
    """
    Get default directory holding per-network manifests.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / "deployments"


def get_manifest_paths(
    network: str, manifest_root: Optional[Union[Path, str]] = None
) -> tuple[Path, Path]:
    """
    Get manifest file paths for a network.

    Args:
        network: Network name
        manifest_root: Custom manifest directory (defaults to ./deployments)

    Returns:
        Tuple of (manifest_path, lock_path)
    """
    if manifest_root is None:
        manifest_root = get_default_manifest_dir()
    else:
        manifest_root = Path(manifest_root).absolute()

    manifest_path = manifest_root / f"{network}.json"
    lock_path = manifest_root / f"{network}.json.lock"

    return (manifest_path, lock_path)
