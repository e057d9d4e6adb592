"""
Command-line interface for zkmember.

Register members into a JSON registry, build the membership tree, and
create or check membership proofs. Hash parameters are derived from a
public seed so every command sees the same tree; proving keys always use
fresh secure randomness.
"""

import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from zkmember import __version__
from zkmember.circuit import MembershipCircuit
from zkmember.config import MembershipConfig, load_config, resolve_curve_name
from zkmember.exceptions import ZKMemberError
from zkmember.hashes import MembershipParameters, setup_parameters
from zkmember.member import Member, generate_members
from zkmember.merkle import MembershipTree
from zkmember.security import RandomnessSource
from zkmember.snark import ProofSystemAdapter, PublicInputs, SetupMode
from zkmember.snark.serialization import (
    members_from_json,
    members_to_json,
    path_to_json,
    proof_from_hex,
    proof_to_hex,
    root_from_hex,
    root_to_hex,
    verifying_key_from_hex,
    verifying_key_to_hex,
)

logger = logging.getLogger(__name__)

DEFAULT_SEED = 0
# Fixed sentinel timestamp so the padding leaf (and root) is stable across runs
PADDING_JOIN_DATE = datetime(1970, 1, 1, tzinfo=timezone.utc)

console = Console()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def _load_settings(
    config_path: Optional[str],
    curve: Optional[str],
    seed: Optional[int],
    rounds: Optional[int],
) -> MembershipConfig:
    config = load_config(config_path) if config_path else MembershipConfig(curve=resolve_curve_name(curve))
    overrides = {}
    if curve is not None:
        overrides["curve"] = curve
    if rounds is not None:
        overrides["mimc_rounds"] = rounds
    if seed is not None:
        overrides["seed"] = seed
    elif config.seed is None:
        overrides["seed"] = DEFAULT_SEED
    return replace(config, **overrides)


def _parameters(settings: MembershipConfig) -> MembershipParameters:
    return setup_parameters(
        settings.curve, RandomnessSource(seed=settings.seed), settings
    )


def _padding_leaf(params: MembershipParameters) -> int:
    return Member.default(join_date=PADDING_JOIN_DATE).hash(params.leaf)


def _read_members(path: str) -> List[Member]:
    file = Path(path)
    if not file.exists():
        return []
    return members_from_json(file.read_text(encoding="utf-8"))


def _fail(message: str) -> None:
    click.echo(click.style(f"✗ {message}", fg="red"), err=True)
    sys.exit(1)


def common_options(func):
    """Options every tree-building command shares."""
    options = [
        click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
                     help="YAML file with MembershipConfig fields"),
        click.option("--curve", type=click.Choice(["bn254", "bls12_381"], case_sensitive=False),
                     help="Pairing curve (default: ZKMEMBER_CURVE or bn254)"),
        click.option("--seed", type=int, help=f"Public seed for hash parameters (default: {DEFAULT_SEED})"),
        click.option("--rounds", type=click.IntRange(min=1), help="MiMC round count"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def main(verbose):
    """
    zkmember - zero-knowledge membership proofs

    ⚠️  DRAFT - requires crypto review before production use
    """
    _configure_logging(verbose)


@main.command("generate-members")
@click.argument("amount", type=click.IntRange(min=1))
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True,
              help="Registry JSON file to write")
@click.option("--padding", type=click.IntRange(min=0), help="Zero bytes of padding per record")
def generate_members_command(amount, output, padding):
    """Write AMOUNT sample members to a registry file."""
    members = generate_members(amount, padding=padding)
    Path(output).write_text(members_to_json(members), encoding="utf-8")
    click.echo(click.style(f"✓ Wrote {len(members)} members to {output}", fg="green"))


@main.command()
@click.option("--members", "members_path", type=click.Path(dir_okay=False), required=True,
              help="Registry JSON file (created if missing)")
@click.option("--id", "member_id", required=True, help="Member identifier")
@click.option("--email", required=True, help="Member email")
@click.option("--end-date", type=click.DateTime(), help="Membership end date (UTC)")
def register(members_path, member_id, email, end_date):
    """Add a member to the registry."""
    try:
        members = _read_members(members_path)
    except ZKMemberError as e:
        _fail(str(e))
    if any(m.id == member_id for m in members):
        _fail(f"Member {member_id!r} is already registered")

    members.append(Member(id=member_id, email=email, end_date=end_date))
    Path(members_path).write_text(members_to_json(members), encoding="utf-8")
    click.echo(click.style(f"✓ Registered {member_id} ({len(members)} members)", fg="green"))


@main.command("build-tree")
@click.option("--members", "members_path", type=click.Path(exists=True, dir_okay=False),
              required=True, help="Registry JSON file")
@common_options
def build_tree_command(members_path, config_path, curve, seed, rounds):
    """Build the membership tree and print its root."""
    try:
        settings = _load_settings(config_path, curve, seed, rounds)
        params = _parameters(settings)
        members = _read_members(members_path)
        tree = MembershipTree.from_members(members, params, padding_leaf=_padding_leaf(params))
    except ZKMemberError as e:
        _fail(str(e))

    table = Table(title="Membership tree")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("curve", settings.curve)
    table.add_row("members", str(tree.member_count))
    table.add_row("leaves", str(tree.leaf_count))
    table.add_row("depth", str(tree.depth))
    console.print(table)
    click.echo(f"root: {root_to_hex(tree.root)}")


@main.command()
@click.option("--members", "members_path", type=click.Path(exists=True, dir_okay=False),
              required=True, help="Registry JSON file")
@click.option("--id", "member_id", required=True, help="Member to prove")
@click.option("--universal", is_flag=True, help="Use a universal setup instead of a per-circuit one")
@common_options
def prove(members_path, member_id, universal, config_path, curve, seed, rounds):
    """Prove that a registered member is in the tree."""
    try:
        settings = _load_settings(config_path, curve, seed, rounds)
        params = _parameters(settings)
        members = _read_members(members_path)
        tree = MembershipTree.from_members(members, params, padding_leaf=_padding_leaf(params))

        index = next((i for i, m in enumerate(members) if m.id == member_id), None)
        if index is None:
            _fail(f"Member {member_id!r} is not registered")

        leaf_hash = tree.leaves[index]
        path = tree.generate_proof(index)
        circuit = MembershipCircuit(params, tree.root, leaf_hash, path)
        blank = MembershipCircuit.blank(params, tree.depth)

        rng = RandomnessSource()
        if universal:
            adapter = ProofSystemAdapter(params.curve, SetupMode.UNIVERSAL, settings.non_zero_factor)
            srs = adapter.universal_setup(adapter.measure(blank), rng)
            pk, vk = adapter.contribute(*adapter.index(srs, blank), rng)
        else:
            adapter = ProofSystemAdapter(params.curve, SetupMode.PER_CIRCUIT)
            pk, vk = adapter.setup(blank, rng)
        proof = adapter.prove(pk, circuit, rng)
    except ZKMemberError as e:
        _fail(str(e))

    logger.debug("Authentication path: %s", path_to_json(path))
    click.echo(f"root: {root_to_hex(tree.root)}")
    click.echo(f"leaf: {root_to_hex(leaf_hash)}")
    click.echo(f"proof: {proof_to_hex(proof, params.curve)}")
    click.echo(f"vk: {verifying_key_to_hex(vk)}")


@main.command()
@click.option("--root", required=True, help="Tree root (hex)")
@click.option("--leaf", required=True, help="Leaf hash (hex)")
@click.option("--proof", "proof_hex", required=True, help="Proof (hex)")
@click.option("--vk", "vk_hex", required=True, help="Verifying key (hex)")
def verify(root, leaf, proof_hex, vk_hex):
    """Check a membership proof."""
    try:
        vk = verifying_key_from_hex(vk_hex)
        proof = proof_from_hex(proof_hex, vk.curve)
        public_inputs = PublicInputs(
            root=root_from_hex(root, vk.curve),
            leaf_hash=root_from_hex(leaf, vk.curve),
        )
        adapter = ProofSystemAdapter(vk.curve)
        ok = adapter.verify(vk, public_inputs, proof)
    except ZKMemberError as e:
        _fail(str(e))

    if ok:
        click.echo(click.style("✓ Proof is valid", fg="green"))
    else:
        _fail("Proof is invalid")


if __name__ == "__main__":
    main()
