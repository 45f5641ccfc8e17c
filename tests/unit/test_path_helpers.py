"""Unit tests for path helper functions."""

from pathlib import Path

from starknet_deployments.paths import (
    get_default_build_dir,
    get_default_manifest_dir,
    get_manifest_paths,
)


class TestDefaultDirs:
    """Test the default directory helpers."""

    def test_build_dir_is_scarb_dev_target(self):
        """Test that the default build dir is Scarb's dev output."""
        build_dir = get_default_build_dir()

        assert isinstance(build_dir, Path)
        assert build_dir == Path.cwd() / "contracts" / "target" / "dev"

    def test_manifest_dir_in_working_directory(self):
        """Test that manifests default to ./deployments."""
        assert get_default_manifest_dir() == Path.cwd() / "deployments"

    def test_returns_absolute_paths(self):
        """Test that returned paths are absolute."""
        assert get_default_build_dir().is_absolute()
        assert get_default_manifest_dir().is_absolute()


class TestGetManifestPaths:
    """Test the get_manifest_paths function."""

    def test_returns_tuple_of_two_paths(self):
        """Test that function returns a tuple of two Path objects."""
        result = get_manifest_paths("sepolia")

        assert isinstance(result, tuple)
        assert len(result) == 2
        assert isinstance(result[0], Path)
        assert isinstance(result[1], Path)

    def test_default_filenames(self):
        """Test that files are named after the network."""
        manifest_path, lock_path = get_manifest_paths("sepolia")

        assert manifest_path.name == "sepolia.json"
        assert lock_path.name == "sepolia.json.lock"
        assert manifest_path.parent == Path.cwd() / "deployments"

    def test_custom_root(self, tmp_path: Path):
        """Test that a custom root is honored."""
        manifest_path, lock_path = get_manifest_paths("mainnet", tmp_path)

        assert manifest_path == tmp_path / "mainnet.json"
        assert lock_path.parent == tmp_path

    def test_custom_root_as_string(self, tmp_path: Path):
        """Test that the root may be given as a string."""
        manifest_path, _ = get_manifest_paths("devnet", str(tmp_path))
        assert manifest_path == tmp_path / "devnet.json"

    def test_relative_root_made_absolute(self):
        """Test that a relative root is resolved against the working directory."""
        manifest_path, _ = get_manifest_paths("devnet", "out")
        assert manifest_path.is_absolute()
        assert manifest_path == Path.cwd() / "out" / "devnet.json"
