"""Click CLI for txstamp."""

import json as json_mod
import logging
import sys
from pathlib import Path

import click

from txstamp.codec import signature_string
from txstamp.config import TxStampConfig, get_scheme, load_config
from txstamp.errors import TxStampError
from txstamp.keystore import address_of, generate_key, load_key, save_key
from txstamp.record import SignedTx, new_tx
from txstamp.signer import Signer
from txstamp.verifier import Verifier


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record):
        return json_mod.dumps({
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str, json_log: bool = False) -> None:
    if json_log:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            handlers=[handler],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def _load_key_or_exit(key_path, passphrase):
    try:
        return load_key(Path(key_path), passphrase=passphrase or None)
    except FileNotFoundError:
        click.echo(f"Error: Key file '{key_path}' not found.", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True),
              default=None, help="Path to config YAML file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json-log", is_flag=True, help="Output logs in structured JSON format")
@click.pass_context
def cli(ctx, config_path, verbose, json_log):
    """txstamp: sign and verify transfer records with a domain-separated stamp."""
    ctx.ensure_object(dict)

    if config_path:
        config = load_config(Path(config_path))
    else:
        config = TxStampConfig()

    if verbose:
        config.log_level = "DEBUG"

    setup_logging(config.log_level, json_log=json_log)
    ctx.obj["config"] = config


@cli.command("keygen")
@click.option("--out", "-o", "out_path", required=True, type=click.Path(),
              help="Where to write the new key file")
@click.option("--passphrase", prompt=False, hide_input=True, default="",
              help="Encrypt the key file with this passphrase")
def keygen(out_path, passphrase):
    """Generate a new secp256k1 key."""
    try:
        address = save_key(Path(out_path), generate_key(), passphrase=passphrase or None)
    except FileExistsError:
        click.echo(f"Error: Key file '{out_path}' already exists.", err=True)
        sys.exit(1)
    click.echo(f"Key written: {out_path}")
    click.echo(f"Address:     {address}")


@cli.command("address")
@click.option("--key", "-k", "key_path", required=True, help="Key file")
@click.option("--passphrase", default="", hide_input=True, help="Key file passphrase")
def address(key_path, passphrase):
    """Print the account id for a key file."""
    click.echo(address_of(_load_key_or_exit(key_path, passphrase)))


@cli.command("sign")
@click.option("--key", "-k", "key_path", required=True, help="Key file of the sender")
@click.option("--passphrase", default="", hide_input=True, help="Key file passphrase")
@click.option("--to", "recipient", required=True, help="Recipient account id (0x...)")
@click.option("--value", required=True, type=click.IntRange(min=0), help="Value to transfer")
@click.option("--tip", default=0, type=click.IntRange(min=0), help="Tip for the transfer")
@click.option("--nonce", default=0, type=click.IntRange(min=0), help="Sender nonce")
@click.option("--chain-id", type=int, default=None, help="Chain ID (default: from config)")
@click.option("--data", default="", help="Payload text (UTF-8)")
@click.option("--out", "-o", "out_path", type=click.Path(), default=None,
              help="Write the signed tx JSON to this file instead of stdout")
@click.pass_context
def sign(ctx, key_path, passphrase, recipient, value, tip, nonce, chain_id, data, out_path):
    """Sign a transfer from the key's account."""
    config = ctx.obj["config"]
    private_key = _load_key_or_exit(key_path, passphrase)
    if chain_id is None:
        chain_id = config.chain_id

    try:
        tx = new_tx(chain_id, nonce, address_of(private_key), recipient,
                    value, tip, data.encode("utf-8"))
        signed = Signer(get_scheme(config)).sign(tx, private_key)
    except TxStampError as e:
        click.echo(f"Error: {e.kind.value}: {e}", err=True)
        sys.exit(1)

    output = signed.to_json(indent=2)
    if out_path:
        Path(out_path).write_text(output + "\n")
        click.echo(f"Signed tx written: {out_path}")
    else:
        click.echo(output)


@cli.command("verify")
@click.argument("signed_file", type=click.Path(exists=True))
@click.option("--chain-id", type=int, default=None, help="Expected chain ID (default: from config)")
@click.pass_context
def verify(ctx, signed_file, chain_id):
    """Validate a signed tx JSON file."""
    config = ctx.obj["config"]
    scheme = get_scheme(config)
    if chain_id is None:
        chain_id = config.chain_id

    try:
        signed = SignedTx.from_json(Path(signed_file).read_bytes())
        Verifier(scheme).validate(signed, chain_id)
    except TxStampError as e:
        click.echo(f"Error: {e.kind.value}: {e}", err=True)
        sys.exit(1)

    click.echo("Signature valid.")
    click.echo(f"Signer:    {signed.tx.from_id}")
    click.echo(f"Signature: {signature_string(signed.v, signed.r, signed.s, scheme.offset)}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
