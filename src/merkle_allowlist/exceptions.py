class MerkleAllowlistError(Exception):
    pass


class EmptyInputError(MerkleAllowlistError):
    """Raised when a tree is built from zero identifiers."""


class EmptyTreeError(MerkleAllowlistError):
    """Raised when asking for the root of a tree with no nodes."""


class NotFoundError(MerkleAllowlistError, KeyError):
    """Raised when a proof is requested for an identifier not in the tree."""


class InvalidIdentifierError(MerkleAllowlistError, ValueError):
    pass
