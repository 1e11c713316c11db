"""
CLI application for lockbox secret sharing.

Commands:
    split          Split a file into k-of-n key files
    combine        Recombine key files into the original file
    seal           Encrypt a file into the store and split its key
    unseal         Open a stored box with any k of its keys
    list           List stored boxes
    export-key     Copy one stored key to a file
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .core.keystore import KeyStore
from .crypto.shamir import CombineOptions, SplitOptions, get_x
from .crypto.vault import seal, unseal


app = typer.Typer(name="lockbox", help="Shamir secret sharing over GF(256)")

# Default keystore directory
DEFAULT_STORE = Path.home() / ".lockbox"


def get_keystore(store_dir: Optional[Path] = None) -> KeyStore:
    """Get KeyStore instance."""
    if store_dir is None:
        store_dir = DEFAULT_STORE
    return KeyStore(store_dir)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Split secrets into keys, any k of which recover them."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


@app.command()
def split(
    input_file: Path = typer.Argument(..., help="File to split"),
    threshold: int = typer.Option(
        ..., "--threshold", "-k", help="Keys needed to recombine"
    ),
    total: Optional[int] = typer.Option(
        None, "--total", "-n", help="Keys to produce (default: threshold)"
    ),
    output_dir: Path = typer.Option(
        ..., "--output", "-o", help="Directory for key files"
    ),
) -> None:
    """
    Split a file into key files.

    Writes OUTPUT/<x>.key for x = 1..n. Any k of them recombine the file.
    """
    with open(input_file, "rb") as f:
        secret = f.read()

    try:
        keys = SplitOptions(threshold=threshold, total_shares=total).split(secret)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    for key in keys:
        with open(output_dir / f"{get_x(key)}.key", "wb") as f:
            f.write(key)

    typer.echo(f"Split {input_file} into {len(keys)} keys (threshold {threshold})")
    typer.echo(f"  Keys: {output_dir}")


@app.command()
def combine(
    key_files: List[Path] = typer.Argument(..., help="Key files to recombine"),
    output_file: Path = typer.Option(..., "--output", "-o", help="Output file"),
    threshold: Optional[int] = typer.Option(
        None, "--threshold", "-k", help="Keys per combination (default: all)"
    ),
) -> None:
    """
    Recombine key files.

    No integrity check is possible here: too few keys, or keys from
    different splits, silently produce garbage.
    """
    keys = [KeyStore.import_key(p) for p in key_files]

    try:
        secret = CombineOptions(threshold=threshold).combine(keys)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    with open(output_file, "wb") as f:
        f.write(secret)

    typer.echo(f"Combined {len(keys)} keys: {output_file}")


@app.command("seal")
def seal_file(
    input_file: Path = typer.Argument(..., help="File to seal"),
    name: str = typer.Option(..., "--name", help="Box name"),
    threshold: int = typer.Option(
        ..., "--threshold", "-k", help="Keys needed to open"
    ),
    total: Optional[int] = typer.Option(
        None, "--total", "-n", help="Keys to produce (default: threshold)"
    ),
    store_dir: Optional[Path] = typer.Option(
        None, "--store", "-s", envvar="LOCKBOX_STORE", help="Key storage directory"
    ),
) -> None:
    """
    Seal a file into the store.

    The file is encrypted with AES-256-GCM and the key is split into
    k-of-n key files.
    """
    keystore = get_keystore(store_dir)

    try:
        if keystore.load_box(name) is not None:
            typer.echo(f"Error: Box '{name}' already exists.", err=True)
            raise typer.Exit(1)

        with open(input_file, "rb") as f:
            plaintext = f.read()

        box, keys = seal(plaintext, threshold, total)
        keystore.save_box(name, box)
        paths = keystore.save_keys(name, keys)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Sealed '{name}' ({box.threshold} of {box.total})")
    for path in paths:
        typer.echo(f"  {path}")


@app.command("unseal")
def unseal_file(
    name: str = typer.Argument(..., help="Box name"),
    output_file: Path = typer.Argument(..., help="Output file"),
    key_files: Optional[List[Path]] = typer.Option(
        None, "--key", help="Key file (repeatable; default: keys in the store)"
    ),
    store_dir: Optional[Path] = typer.Option(
        None, "--store", "-s", envvar="LOCKBOX_STORE", help="Key storage directory"
    ),
) -> None:
    """
    Open a sealed box.

    Tries every threshold-sized subset of the keys until one decrypts
    the box, so extra or corrupt keys are tolerated.
    """
    keystore = get_keystore(store_dir)

    try:
        box = keystore.load_box(name)
        if box is None:
            typer.echo(f"Error: Box '{name}' not found.", err=True)
            raise typer.Exit(1)

        if key_files:
            keys = [KeyStore.import_key(p) for p in key_files]
        else:
            keys = keystore.load_keys(name)

        if not keys:
            typer.echo(f"Error: No keys for box '{name}'.", err=True)
            raise typer.Exit(1)

        plaintext = unseal(box, keys)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if plaintext is None:
        typer.echo(
            f"Error: No {box.threshold} of the {len(keys)} keys open '{name}'.",
            err=True,
        )
        raise typer.Exit(1)

    with open(output_file, "wb") as f:
        f.write(plaintext)

    typer.echo(f"Unsealed: {output_file}")


@app.command("list")
def list_boxes(
    store_dir: Optional[Path] = typer.Option(
        None, "--store", "-s", envvar="LOCKBOX_STORE", help="Key storage directory"
    ),
) -> None:
    """
    List stored boxes.
    """
    keystore = get_keystore(store_dir)
    names = keystore.list_boxes()

    typer.echo("Boxes:")
    typer.echo("-" * 50)
    try:
        for name in names:
            box = keystore.load_box(name)
            stored = len(keystore.load_keys(name))
            typer.echo(
                f"  {name}: threshold={box.threshold}, total={box.total}, "
                f"stored keys={stored}"
            )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not names:
        typer.echo("  (none)")


@app.command("export-key")
def export_key(
    name: str = typer.Argument(..., help="Box name"),
    x: int = typer.Argument(..., help="x-coordinate of the key"),
    output: Path = typer.Option(..., "--output", "-o", help="Output file"),
    store_dir: Optional[Path] = typer.Option(
        None, "--store", "-s", envvar="LOCKBOX_STORE", help="Key storage directory"
    ),
) -> None:
    """Export one of a box's keys to file."""
    keystore = get_keystore(store_dir)
    try:
        keystore.export_key(name, x, output)
        typer.echo(f"Exported: {output}")
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
