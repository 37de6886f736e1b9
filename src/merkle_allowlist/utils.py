import base64
import json
import sys
from pathlib import Path
from typing import Dict, List, Sequence, Union

from eth_utils import is_hex_address
from loguru import logger
from web3 import Web3

from merkle_allowlist.const import ENCODINGS
from merkle_allowlist.exceptions import InvalidIdentifierError
from merkle_allowlist.tree import MerkleTree, get_proof, get_root


def init_logger(log_dir: Union[str, Path] = "logs", level: str = "INFO"):
    """File sink keeps tree-building debug output, stdout only shows `level` and up"""

    logger.remove()

    logger.add(
        str(Path(log_dir) / "{time:MM_D}" / "{time:HH_mm}.log"),
        format="{time:HH:mm:ss} | {name}.{function}:{line} | {level} - {message}",
        level="DEBUG",
    )
    logger.add(
        sys.stdout,
        level=level,
        format="<level>{time:HH:mm:ss}</level> | <lk>{function}</lk>:<lk>{line}</lk> | <level>{level}</level> - 🌳 <magenta>{message}</magenta>",
        colorize=True,
    )


def parse_address(text: str) -> bytes:
    address = text.strip()
    if not address.startswith(("0x", "0X")):
        address = "0x" + address

    if not is_hex_address(address):
        raise InvalidIdentifierError(f"Invalid address: {text!r}")

    return bytes.fromhex(address[2:])


def load_allowlist(path: Union[str, Path]) -> List[bytes]:
    addresses = []

    with open(path, "r") as f:
        for number, line in enumerate(f.read().splitlines(), start=1):
            line = line.split("#", 1)[0].strip()
            if not line:
                continue

            try:
                addresses.append(parse_address(line))
            except InvalidIdentifierError as e:
                raise InvalidIdentifierError(f"{path}:{number}: {e}") from e

    logger.debug(f"Loaded {len(addresses)} addresses from {path}")

    return addresses


def encode_hash(value: bytes, encoding: str = "hex") -> str:
    if encoding == "hex":
        return Web3.to_hex(value)
    if encoding == "base64":
        return base64.b64encode(value).decode()

    raise ValueError(f"Unknown encoding {encoding!r}, expected one of {ENCODINGS}")


def proofs_document(tree: MerkleTree, addresses: Sequence[bytes]) -> Dict:
    """
    JSON-ready mapping of checksum address to its hex proof,
    in the shape the minting front-end consumes.
    """

    proofs = {}
    for address in addresses:
        checksum_address = Web3.to_checksum_address(Web3.to_hex(address))
        proofs[checksum_address] = [encode_hash(node) for node in get_proof(tree, address)]

    return {
        "root": encode_hash(get_root(tree)),
        "proofs": proofs,
    }


def export_proofs(tree: MerkleTree, addresses: Sequence[bytes], path: Union[str, Path]) -> None:
    document = proofs_document(tree, addresses)

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(document, f, indent=2)

    logger.debug(f"Wrote {len(document['proofs'])} proofs to {path}")
