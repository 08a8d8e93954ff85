"""
Command-line interface for schnorr-key.

Usage:
    schnorr-key fingerprint key.json --controller did:example:123
    schnorr-key sign key.json --data payload.bin
    schnorr-key verify key.json --data payload.bin --signature <jws>
    schnorr-key resolve https://w3id.org/security/v2
    cat key.json | schnorr-key fingerprint -
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from schnorr_key import __version__
from schnorr_key.document_loader import UnsupportedContextUrlError, default_resolver
from schnorr_key.header import JWSHeaderError
from schnorr_key.schnorr_es256k import InvalidKeyError
from schnorr_key.verification_key import (
    SchnorrSecp256k1VerificationKey2019,
    VerificationKeyError,
)

console = Console()
error_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def load_key_record(source: str, timeout: float = 30.0, verify_ssl: bool = True) -> dict[str, Any]:
    """Load a JWK or verification method record from file, URL, or stdin.

    Args:
        source: File path, URL, or "-" for stdin.
        timeout: HTTP request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates.

    Returns:
        Parsed JSON object.
    """
    if source == "-":
        return json.loads(sys.stdin.read())

    if source.startswith("http://") or source.startswith("https://"):
        with httpx.Client(timeout=timeout, verify=verify_ssl) as client:
            response = client.get(
                source,
                headers={"Accept": "application/jwk+json, application/json"},
            )
            response.raise_for_status()
            return response.json()

    path = Path(source)
    if not path.exists():
        raise click.ClickException(f"File not found: {source}")

    with path.open() as f:
        return json.load(f)


def build_key(record: dict[str, Any], controller: str | None) -> SchnorrSecp256k1VerificationKey2019:
    """Build a key from a bare JWK or a verification method record."""
    if "kty" in record:
        if not controller:
            raise click.UsageError("--controller is required when SOURCE is a bare JWK")
        if "d" in record:
            return SchnorrSecp256k1VerificationKey2019(controller, private_key_jwk=record)
        return SchnorrSecp256k1VerificationKey2019(controller, public_key_jwk=record)

    options = dict(record)
    if controller:
        options["controller"] = controller
    if not options.get("controller"):
        raise click.UsageError("SOURCE has no controller; pass --controller")
    return asyncio.run(SchnorrSecp256k1VerificationKey2019.from_options(options))


def read_data(data: str) -> bytes:
    """Read payload bytes from a file or stdin."""
    if data == "-":
        return sys.stdin.buffer.read()
    path = Path(data)
    if not path.exists():
        raise click.ClickException(f"File not found: {data}")
    return path.read_bytes()


def format_key(key: SchnorrSecp256k1VerificationKey2019) -> None:
    """Print a key summary."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("ID", key.id)
    table.add_row("Type", key.type)
    table.add_row("Controller", key.controller or "[dim]none[/]")
    table.add_row("Fingerprint", key.fingerprint())
    table.add_row("Private key", "[green]yes[/]" if key.private_key else "[dim]no[/]")

    console.print(Panel(table, title="Verification Key", border_style="blue"))


@click.group()
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    help="HTTP request timeout in seconds",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    help="Disable SSL certificate verification",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__)
@click.pass_context
def cli(ctx: click.Context, timeout: float, no_ssl_verify: bool, verbose: bool) -> None:
    """Schnorr secp256k1 verification keys for linked data proofs.

    SOURCE arguments can be a file path, an http(s) URL, or "-" for stdin,
    holding either a JWK or a verification method with publicKeyJwk /
    privateKeyJwk.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["timeout"] = timeout
    ctx.obj["verify_ssl"] = not no_ssl_verify


def _load(ctx: click.Context, source: str, controller: str | None) -> SchnorrSecp256k1VerificationKey2019:
    try:
        record = load_key_record(source, ctx.obj["timeout"], ctx.obj["verify_ssl"])
        return build_key(record, controller)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}") from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"HTTP error: {e}") from e
    except InvalidKeyError as e:
        raise click.ClickException(f"Invalid key: {e}") from e


@cli.command()
@click.argument("source")
@click.option("--controller", help="Controller DID for a bare JWK")
@click.option("--json-output", is_flag=True, help="Output the public node as JSON")
@click.pass_context
def fingerprint(ctx: click.Context, source: str, controller: str | None, json_output: bool) -> None:
    """Print the key fingerprint and public node."""
    key = _load(ctx, source, controller)
    if json_output:
        console.print_json(data={"fingerprint": key.fingerprint(), "publicNode": key.public_node()})
    else:
        format_key(key)


@cli.command()
@click.argument("source")
@click.option("--controller", help="Controller DID for a bare JWK")
@click.option("--data", "data_path", required=True, help="Payload file, or - for stdin")
@click.pass_context
def sign(ctx: click.Context, source: str, controller: str | None, data_path: str) -> None:
    """Sign a payload, printing the detached JWS."""
    key = _load(ctx, source, controller)
    payload = read_data(data_path)
    try:
        jws = asyncio.run(key.signer().sign(data=payload))
    except (VerificationKeyError, ValueError) as e:
        raise click.ClickException(f"Signing failed: {e}") from e
    click.echo(jws)


def _report_malformed(message: str, json_output: bool) -> NoReturn:
    if json_output:
        console.print_json(data={"error": message})
    else:
        console.print(f"[red]Error:[/] {message}")
    sys.exit(2)


@cli.command()
@click.argument("source")
@click.option("--controller", help="Controller DID for a bare JWK")
@click.option("--data", "data_path", required=True, help="Payload file, or - for stdin")
@click.option("--signature", required=True, help="Detached JWS to check")
@click.option("--json-output", is_flag=True, help="Output result as JSON")
@click.pass_context
def verify(
    ctx: click.Context,
    source: str,
    controller: str | None,
    data_path: str,
    signature: str,
    json_output: bool,
) -> None:
    """Verify a detached JWS over a payload.

    Exits 0 when valid, 1 when the signature does not match, and 2 when
    the input is malformed.
    """
    try:
        key = _load(ctx, source, controller)
        payload = read_data(data_path)
    except click.ClickException as e:
        _report_malformed(e.format_message(), json_output)

    try:
        valid = asyncio.run(key.verifier().verify(data=payload, signature=signature))
    except (JWSHeaderError, VerificationKeyError) as e:
        _report_malformed(str(e), json_output)

    if json_output:
        console.print_json(data={"valid": valid, "verificationMethod": key.id})
    elif valid:
        console.print(Panel(f"Signature valid for {key.id}", border_style="green"))
    else:
        console.print(Panel(f"Signature INVALID for {key.id}", border_style="red"))
    sys.exit(0 if valid else 1)


@cli.command()
@click.argument("url")
def resolve(url: str) -> None:
    """Resolve a context URL or DID from the static table."""
    try:
        result = default_resolver.resolve(url)
    except UnsupportedContextUrlError as e:
        raise click.ClickException(str(e)) from e
    console.print_json(data=result)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
