"""Compiled contract loading for starknet-deployments library."""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

from starknet_py.common import create_casm_class, create_sierra_compiled_contract
from starknet_py.hash.casm_class_hash import compute_casm_class_hash
from starknet_py.hash.sierra_class_hash import compute_sierra_class_hash

from .exceptions import ArtifactCorruptError, ArtifactError, ArtifactNotFoundError
from .paths import get_default_build_dir
from .types import ContractArtifact

logger = logging.getLogger(__name__)

SIERRA_SUFFIX = ".contract_class.json"
CASM_SUFFIX = ".compiled_contract_class.json"

ClassHasher = Callable[[str, str], Tuple[int, int]]


def compute_class_hashes(sierra: str, casm: str) -> Tuple[int, int]:
    """
    Compute class hash and compiled class hash locally with starknet-py.

    Args:
        sierra: Raw Sierra contract class JSON
        casm: Raw CASM compiled class JSON

    Returns:
        Tuple of (class_hash, compiled_class_hash)
    """
    sierra_class = create_sierra_compiled_contract(compiled_contract=sierra)
    class_hash = compute_sierra_class_hash(sierra_class.convert_to_sierra_contract_class())
    compiled_class_hash = compute_casm_class_hash(create_casm_class(casm))
    return class_hash, compiled_class_hash


def find_sierra_file(build_dir: Path, name: str) -> Path:
    """
    Find the Sierra output of a contract in a Scarb build directory.

    Scarb names outputs <package>_<Contract>.contract_class.json; a bare
    <Contract>.contract_class.json is accepted too.

    Args:
        build_dir: Directory holding compiled contracts
        name: Logical contract name

    Returns:
        Path to the Sierra contract class file

    Raises:
        ArtifactNotFoundError: If no file matches
        ArtifactError: If several packages provide the same contract
    """
    exact = build_dir / f"{name}{SIERRA_SUFFIX}"
    if exact.exists():
        return exact

    matches = sorted(build_dir.glob(f"*_{name}{SIERRA_SUFFIX}"))
    if not matches:
        raise ArtifactNotFoundError(
            f"No compiled contract '{name}' in {build_dir}. Run `scarb build` first."
        )
    if len(matches) > 1:
        raise ArtifactError(
            f"Contract name '{name}' is ambiguous in {build_dir}: "
            + ", ".join(m.name for m in matches)
        )
    return matches[0]


class ArtifactResolver:
    """Loads compiled contract classes by logical name, once per run."""

    def __init__(
        self,
        build_dir: Optional[Union[Path, str]] = None,
        class_hasher: ClassHasher = compute_class_hashes,
    ):
        """
        Initialize the resolver.

        Args:
            build_dir: Scarb build output (defaults to ./contracts/target/dev)
            class_hasher: Function computing (class_hash, compiled_class_hash)
        """
        self.build_dir = Path(build_dir) if build_dir is not None else get_default_build_dir()
        self._class_hasher = class_hasher
        self._cache: Dict[str, ContractArtifact] = {}

    def resolve(self, name: str) -> ContractArtifact:
        """
        Load a compiled contract.

        Args:
            name: Logical contract name, e.g. "Gem"

        Returns:
            The same ContractArtifact object for repeated calls with one name

        Raises:
            ArtifactNotFoundError: If Sierra or CASM output is missing
            ArtifactCorruptError: If the output cannot be parsed or hashed
        """
        if name in self._cache:
            return self._cache[name]

        sierra_path = find_sierra_file(self.build_dir, name)
        casm_path = sierra_path.with_name(sierra_path.name[: -len(SIERRA_SUFFIX)] + CASM_SUFFIX)
        if not casm_path.exists():
            raise ArtifactNotFoundError(
                f"Missing CASM output for '{name}': expected {casm_path}"
            )

        sierra = sierra_path.read_text()
        casm = casm_path.read_text()

        try:
            abi = json.loads(sierra)["abi"]
            json.loads(casm)
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ArtifactCorruptError(f"Cannot parse compiled contract '{name}': {e}") from e

        # ABI is sometimes stored as a JSON string
        if isinstance(abi, str):
            try:
                abi = json.loads(abi)
            except json.JSONDecodeError as e:
                raise ArtifactCorruptError(f"Cannot parse ABI of '{name}': {e}") from e

        try:
            class_hash, compiled_class_hash = self._class_hasher(sierra, casm)
        except Exception as e:
            raise ArtifactCorruptError(f"Cannot compute class hash of '{name}': {e}") from e

        artifact = ContractArtifact(
            name=name,
            sierra=sierra,
            casm=casm,
            abi=abi,
            class_hash=class_hash,
            compiled_class_hash=compiled_class_hash,
        )
        logger.debug("Loaded %s (class hash %s) from %s", name, hex(class_hash), sierra_path)
        self._cache[name] = artifact
        return artifact
