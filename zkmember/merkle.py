"""
Membership tree over hashed member records.

Leaves are leaf-hash outputs (field elements). Interior nodes are computed
with the two-to-one compression hash, left child first. The leaf level is
padded to a power of two with the hash of the sentinel member record, so a
tree over n members always has next_power_of_two(n) leaves (two for n = 1).

Authentication paths list (sibling, is_left) steps from the leaf level up,
where is_left is True when the sibling sits on the left of the current node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .exceptions import EmptyMembershipError, EncodingError, LeafIndexError, PathFormatError
from .hashes import MembershipParameters
from .member import Member

logger = logging.getLogger(__name__)

PathStep = Tuple[int, bool]


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def is_field_element(value: object, modulus: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < modulus


@dataclass(frozen=True)
class AuthenticationPath:
    """
    Sibling hashes from a leaf up to the root.

    Attributes:
        steps: (sibling, is_left) per level, leaf level first
    """

    steps: Tuple[PathStep, ...]

    def __post_init__(self) -> None:
        try:
            steps = tuple(tuple(step) for step in self.steps)
        except TypeError as exc:
            raise PathFormatError(f"path steps must be (sibling, is_left) pairs: {exc}") from exc

        for level, step in enumerate(steps):
            if len(step) != 2:
                raise PathFormatError(f"step {level} has {len(step)} fields, expected 2")
            sibling, is_left = step
            if not isinstance(sibling, int) or isinstance(sibling, bool) or sibling < 0:
                raise PathFormatError(f"step {level} sibling is not a field element")
            if not isinstance(is_left, bool):
                raise PathFormatError(f"step {level} position flag is not a bool")
        object.__setattr__(self, "steps", steps)

    @property
    def depth(self) -> int:
        return len(self.steps)

    @property
    def leaf_index(self) -> int:
        """Leaf position encoded by the position flags."""
        index = 0
        for level, (_, is_left) in enumerate(self.steps):
            if is_left:
                index |= 1 << level
        return index

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)


class MembershipTree:
    """
    Complete binary tree of field elements.

    Build with `build_tree` or `MembershipTree.from_members`.

    Example:
        >>> tree = build_tree(leaf_hashes, params)
        >>> path = tree.generate_proof(0)
        >>> verify_path(path, params, tree.root, leaf_hashes[0])
        True
    """

    def __init__(self, levels: List[List[int]], params: MembershipParameters, member_count: int):
        self._levels = levels
        self.params = params
        self.member_count = member_count

    @classmethod
    def build(
        cls,
        leaf_hashes: Sequence[int],
        params: MembershipParameters,
        padding_leaf: Optional[int] = None,
    ) -> "MembershipTree":
        """
        Pad `leaf_hashes` to a power of two and hash up to the root.

        Args:
            leaf_hashes: Member leaf hashes in tree order
            params: Hash parameters
            padding_leaf: Filler leaf; defaults to the hash of Member.default()

        Raises:
            EmptyMembershipError: If leaf_hashes is empty
            EncodingError: If a leaf is not a field element
        """
        leaves = list(leaf_hashes)
        n = len(leaves)
        if n == 0:
            raise EmptyMembershipError("Cannot build a membership tree with zero members")

        modulus = params.modulus
        for i, leaf in enumerate(leaves):
            if not is_field_element(leaf, modulus):
                raise EncodingError(f"leaf {i} is not a field element")

        target = 2 if n == 1 else next_power_of_two(n)
        if target > n:
            if padding_leaf is None:
                padding_leaf = Member.default().hash(params.leaf)
            elif not is_field_element(padding_leaf, modulus):
                raise EncodingError("padding leaf is not a field element")
            leaves.extend([padding_leaf] * (target - n))

        levels = [leaves]
        while len(levels[-1]) > 1:
            current = levels[-1]
            levels.append([
                params.compress(current[i], current[i + 1])
                for i in range(0, len(current), 2)
            ])

        logger.debug(
            "Built membership tree: %d members, %d leaves, depth %d",
            n,
            len(leaves),
            len(levels) - 1,
        )
        return cls(levels, params, n)

    @classmethod
    def from_members(
        cls,
        members: Iterable[Member],
        params: MembershipParameters,
        padding_leaf: Optional[int] = None,
    ) -> "MembershipTree":
        """Hash each record with the leaf hash, then build."""
        leaf_hashes = [member.hash(params.leaf) for member in members]
        return cls.build(leaf_hashes, params, padding_leaf=padding_leaf)

    @property
    def root(self) -> int:
        return self._levels[-1][0]

    @property
    def depth(self) -> int:
        return len(self._levels) - 1

    @property
    def leaf_count(self) -> int:
        return len(self._levels[0])

    @property
    def leaves(self) -> Tuple[int, ...]:
        return tuple(self._levels[0])

    def generate_proof(self, index: int) -> AuthenticationPath:
        """
        Authentication path for the leaf at `index`.

        Raises:
            LeafIndexError: If index is outside [0, leaf_count)
        """
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < self.leaf_count:
            raise LeafIndexError(
                f"leaf index {index!r} out of range for {self.leaf_count} leaves"
            )

        steps = []
        idx = index
        for level in self._levels[:-1]:
            # Odd index: this node is a right child, sibling on the left
            steps.append((level[idx ^ 1], bool(idx & 1)))
            idx >>= 1
        return AuthenticationPath(tuple(steps))


def build_tree(
    leaf_hashes: Sequence[int],
    params: MembershipParameters,
    padding_leaf: Optional[int] = None,
) -> MembershipTree:
    """See MembershipTree.build."""
    return MembershipTree.build(leaf_hashes, params, padding_leaf=padding_leaf)


def verify_path(
    path: "AuthenticationPath | Sequence[PathStep]",
    params: MembershipParameters,
    root: int,
    leaf_hash: int,
    depth: Optional[int] = None,
) -> bool:
    """
    Recompute the root from `leaf_hash` along `path`.

    Args:
        path: Authentication path (or raw steps)
        params: Hash parameters
        root: Expected root
        leaf_hash: Leaf being proven
        depth: Expected tree depth, if known

    Returns:
        True if the recomputed root equals `root`, False otherwise
        (including malformed or out-of-range values)

    Raises:
        PathFormatError: If depth is given and differs from the path length
    """
    if not isinstance(path, AuthenticationPath):
        try:
            path = AuthenticationPath(tuple(path))
        except (PathFormatError, TypeError):
            return False

    if depth is not None and depth != path.depth:
        raise PathFormatError(f"path has {path.depth} levels, expected {depth}")

    modulus = params.modulus
    if not (is_field_element(root, modulus) and is_field_element(leaf_hash, modulus)):
        return False

    current = leaf_hash
    for sibling, is_left in path.steps:
        if not is_field_element(sibling, modulus):
            return False
        if is_left:
            current = params.compress(sibling, current)
        else:
            current = params.compress(current, sibling)

    return current == root
