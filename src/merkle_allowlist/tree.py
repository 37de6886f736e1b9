from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple

from loguru import logger
from web3 import Web3

from merkle_allowlist.exceptions import (
    EmptyInputError,
    EmptyTreeError,
    InvalidIdentifierError,
    NotFoundError,
)


HashFn = Callable[[bytes], bytes]

BYTES_TYPES = (bytes, bytearray, memoryview)


def keccak256(data: bytes) -> bytes:
    return bytes(Web3.keccak(primitive=data))


def hash_pair(a: bytes, b: bytes, hash_fn: HashFn = keccak256) -> bytes:
    """Hash two nodes after sorting them, so their order does not matter"""

    if a > b:
        a, b = b, a

    return hash_fn(a + b)


@dataclass(frozen=True)
class MerkleTree:
    """
    Sorted-pair Merkle tree over a set of identifiers.

    layers[0] holds the leaves in ascending order without duplicates,
    layers[-1] holds the root. When a layer has an odd number of nodes
    the last one is carried up unchanged.
    """

    layers: Tuple[Tuple[bytes, ...], ...]
    hash_fn: HashFn = keccak256

    @property
    def leaves(self) -> Tuple[bytes, ...]:
        return self.layers[0] if self.layers else ()

    @property
    def depth(self) -> int:
        return max(len(self.layers) - 1, 0)

    def __len__(self) -> int:
        return len(self.leaves)

    def __contains__(self, identifier: bytes) -> bool:
        try:
            self.leaf_index(identifier)
        except NotFoundError:
            return False

        return True

    def leaf_index(self, identifier: bytes) -> int:
        if not isinstance(identifier, BYTES_TYPES):
            raise NotFoundError(f"Identifier must be bytes, got {type(identifier).__name__}")

        leaf = self.hash_fn(bytes(identifier))

        try:
            return self.leaves.index(leaf)
        except ValueError:
            raise NotFoundError(f"Identifier 0x{bytes(identifier).hex()} is not in the tree")


def _check_identifiers(identifiers: Iterable[bytes]) -> List[bytes]:
    checked = []

    for identifier in identifiers:
        if not isinstance(identifier, BYTES_TYPES):
            raise InvalidIdentifierError(
                f"Identifier must be bytes, got {type(identifier).__name__}"
            )
        checked.append(bytes(identifier))

    lengths = {len(identifier) for identifier in checked}
    if len(lengths) > 1:
        raise InvalidIdentifierError(
            f"Identifiers must have the same length, got lengths {sorted(lengths)}"
        )

    if 0 in lengths:
        raise InvalidIdentifierError("Identifiers must not be empty")

    return checked


def build_tree(identifiers: Sequence[bytes], hash_fn: HashFn = keccak256) -> MerkleTree:
    identifiers = _check_identifiers(identifiers)

    if not identifiers:
        raise EmptyInputError("Can't build a Merkle tree without identifiers")

    leaves = sorted({hash_fn(identifier) for identifier in identifiers})

    if len(leaves) < len(identifiers):
        logger.debug(f"Dropped {len(identifiers) - len(leaves)} duplicate identifiers")

    layers = [tuple(leaves)]

    while len(layers[-1]) > 1:
        current = layers[-1]
        parents = [
            hash_pair(current[i], current[i + 1], hash_fn)
            for i in range(0, len(current) - 1, 2)
        ]

        if len(current) % 2:
            parents.append(current[-1])

        layers.append(tuple(parents))

    logger.debug(f"Built Merkle tree with {len(leaves)} leaves and {len(layers)} layers")

    return MerkleTree(layers=tuple(layers), hash_fn=hash_fn)


def get_root(tree: MerkleTree) -> bytes:
    if not tree.layers or not tree.layers[-1]:
        raise EmptyTreeError("Merkle tree has no nodes")

    return tree.layers[-1][0]


def get_proof(tree: MerkleTree, identifier: bytes) -> List[bytes]:
    """Collect sibling hashes from the identifier's leaf up to the root"""

    index = tree.leaf_index(identifier)
    proof = []

    for layer in tree.layers[:-1]:
        sibling = index ^ 1

        # the carried node of an odd layer has no sibling
        if sibling < len(layer):
            proof.append(layer[sibling])

        index //= 2

    return proof


def verify_proof(
    root: bytes,
    identifier: bytes,
    proof: Sequence[bytes],
    hash_fn: HashFn = keccak256
) -> bool:
    """Recompute the root from an identifier and its proof, never raises"""

    if not isinstance(root, BYTES_TYPES) or not isinstance(identifier, BYTES_TYPES):
        return False

    try:
        node = hash_fn(bytes(identifier))

        for sibling in proof:
            if not isinstance(sibling, BYTES_TYPES) or len(sibling) != len(node):
                return False

            sibling = bytes(sibling)

            node = hash_pair(node, sibling, hash_fn)

        return node == bytes(root)
    except Exception as e:
        logger.debug(f"Proof verification failed with error: {e}")
        return False
