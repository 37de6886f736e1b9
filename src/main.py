from pathlib import Path
from typing import Union

from loguru import logger

from config import ALLOWLIST_FILE, PROOFS_FILE
from merkle_allowlist.const import ENCODINGS
from merkle_allowlist.exceptions import MerkleAllowlistError
from merkle_allowlist.tree import build_tree, get_proof, get_root, verify_proof
from merkle_allowlist.utils import encode_hash, export_proofs, init_logger, load_allowlist


def run(
    allowlist_path: Union[str, Path] = ALLOWLIST_FILE,
    proofs_path: Union[str, Path] = PROOFS_FILE
) -> bytes:
    addresses = load_allowlist(allowlist_path)

    logger.info(f"Loaded {len(addresses)=} from {allowlist_path}.")

    tree = build_tree(addresses)
    root = get_root(tree)

    for encoding in ENCODINGS:
        logger.success(f"ROOT ({encoding}): {encode_hash(root, encoding)}")

    for address in addresses:
        if not verify_proof(root, address, get_proof(tree, address)):
            logger.error(f"[{encode_hash(address)}] Proof does not match the root.")
            raise MerkleAllowlistError(f"Invalid proof for {encode_hash(address)}")

    export_proofs(tree, addresses, proofs_path)

    logger.info(f"Saved {len(tree)} proofs to {proofs_path}, tree depth is {tree.depth}.")

    return root


def main():
    init_logger()

    try:
        run()
    except (OSError, MerkleAllowlistError) as e:
        logger.error(f"Failed to generate allowlist root with error: {e}")
        raise


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Exiting...")
