#!/usr/bin/env python
#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# To use this, install with:
#
#   pip install --editable .
#
# That will create the command "mintclaim" in your path.
#
#
import click, sys, os

from mintclaim.utils import B2A, hex_groups
from mintclaim.constants import *
from mintclaim.exceptions import InvalidToken
from mintclaim.packing import ClaimRecord, dump_fields
from mintclaim.signing import key_ident
from mintclaim.token import issue, from_token, decode_and_verify
from mintclaim.verify_link import claim_url, token_from_url
from mintclaim import __version__

# dict of options that apply to all commands
global global_opts
global_opts = dict()

# Cleanup display (supress traceback) for user-feedback exceptions
_sys_excepthook = sys.excepthook
def my_hook(ty, val, tb):
    if issubclass(ty, RuntimeError):
        print("FATAL: %s" % val, file=sys.stderr)
    else:
        return _sys_excepthook(ty, val, tb)
sys.excepthook=my_hook

def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)

def get_secret():
    # secret key from --secret or environment; never shown
    rv = global_opts.get('secret')
    if not rv:
        fail(f"Need secret key: use --secret or set {SECRET_ENV_VAR} in environment.")
    return rv

def make_record(serial, color, product_type):
    rec = ClaimRecord(serial, color.strip(), product_type.strip())
    if not rec.is_valid():
        fail("Serial number, color and product type are all required.")
    return rec

def dump_dict(d):
    for k,v in d.items():
        if isinstance(v, (bytes, bytearray)):
            v = B2A(v)

        click.echo('%s: %s' % (k, v))

# Accept any prefix of a command name.
#
# from <https://click.palletsprojects.com/en/8.0.x/advanced/?#command-aliases>
class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Abiguous command. Pick one of: {' | '.join(sorted(matches))}")

    def resolve_command(self, ctx, args):
        # always return the full command name
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args


#
# Options we want for all commands
#
@click.group(cls=AliasedGroup)
@click.option('--secret', '-k', default=None, envvar=SECRET_ENV_VAR, metavar="SECRET",
                    help=f"Secret key for signing/verifying (default: ${SECRET_ENV_VAR})")
@click.option('--verbose', '-v', is_flag=True,
                    help="Explain why tokens are rejected.")
@click.option('--pdb', is_flag=True,
                    help="Prepare patient for surgery to remove bugs.")
@click.version_option(version=__version__)
def main(**kws):
    '''
    Issue and check claim tokens for physical products.

    Each token is a URL-safe string binding serial number, color and
    product type, signed with the secret key.

    You can use "iss", or "i" for "issue": any distinct prefix for all commands.

    '''
    # implement PDB option here
    if kws.pop('pdb', False):
        import pdb, sys
        def doit(ex_cls, ex, tb):
            pdb.pm()
        sys.excepthook = doit

    import mintclaim.token as tt
    tt.VERBOSE = bool(kws.get('verbose'))

    # global options, mostly not considered here
    global global_opts
    global_opts.update(kws)


@main.command('issue')
@click.argument('serial', type=click.IntRange(min=0, max=MAX_SERIAL), metavar="SERIAL#")
@click.argument('color', type=str)
@click.argument('product_type', type=str, metavar="TYPE")
@click.option('--url', '-u', is_flag=True, help="Show full claim link, not just the token")
@click.option('--base-url', '-b', default=DEFAULT_BASE_URL, show_default=True,
                    help="Website for the claim link")
def issue_token(serial, color, product_type, url, base_url):
    "Make the claim token for one product"
    rec = make_record(serial, color, product_type)
    token = issue(rec, get_secret())

    click.echo(claim_url(token, base_url) if url else token)

@main.command('check')
@click.argument('token', type=str, metavar="TOKEN|URL")
def check_token(token):
    "Verify a claim token (or link) and show what it claims"
    secret = get_secret()
    try:
        rec = decode_and_verify(token_from_url(token), secret)
    except InvalidToken:
        fail("Invalid token")

    dump_dict(dict(rec._asdict(), product_id=rec.product_id, image_path=rec.image_path))

@main.command('decode')
@click.argument('token', type=str, metavar="TOKEN|URL")
def decode_token(token):
    "Show fields inside a token WITHOUT checking signature (debug)"
    try:
        payload, sig = from_token(token_from_url(token))
        fields = dump_fields(payload)
    except InvalidToken as exc:
        fail(str(exc))

    click.echo("UNVERIFIED, do not trust these values:")
    for key, raw, val in fields:
        click.echo('%s: %r  [%s]' % (key, val, B2A(raw)))

    click.echo('payload: ' + hex_groups(payload))
    click.echo('signature: ' + hex_groups(sig))

@main.command('qr')
@click.argument('serial', type=click.IntRange(min=0, max=MAX_SERIAL), metavar="SERIAL#")
@click.argument('color', type=str)
@click.argument('product_type', type=str, metavar="TYPE")
@click.option('--outfile', '-o', metavar="filename.png",
                        help="Save an SVG or PNG (depends on extension)", default=None,
                        type=click.File('wb'))
@click.option('--base-url', '-b', default=DEFAULT_BASE_URL, show_default=True,
                    help="Website for the claim link")
@click.option('--error-mode', '-e', default='L', metavar="L|M|H",
            help="Forward error correction level (L = low, H=High=bigger)")
def get_claim_qr(serial, color, product_type, outfile, base_url, error_mode):
    "Show claim link for one product as a QR, for the sticker"
    import pyqrcode

    rec = make_record(serial, color, product_type)
    url = claim_url(issue(rec, get_secret()), base_url)

    q = pyqrcode.create(url, error=error_mode)

    if not outfile:
        click.echo(q.terminal(quiet_zone=2))
        click.echo(url)
        click.echo()
    else:
        if outfile.name.lower().endswith('.svg'):
            q.svg(outfile, scale=1)
        else:
            q.png(outfile)

        click.echo(f"Wrote {outfile.tell():,} bytes to: {outfile.name}", err=1)

@main.command('batch')
@click.argument('color', type=str)
@click.argument('product_type', type=str, metavar="TYPE")
@click.option('--first', '-f', type=click.IntRange(min=0, max=MAX_SERIAL), default=1,
                    show_default=True, help="First serial number")
@click.option('--count', '-n', type=click.IntRange(min=1), default=100,
                    show_default=True, help="How many tokens")
@click.option('--outfile', '-o', metavar="filename.cbor", default=None,
                    help="Manifest file to write", type=str)
@click.option('--base-url', '-b', default=DEFAULT_BASE_URL, show_default=True,
                    help="Website for the claim links")
def make_batch(color, product_type, first, count, outfile, base_url):
    "Issue tokens for a range of serial numbers, into a manifest file"
    from mintclaim.batch import make_records, build_manifest

    if first + count - 1 > MAX_SERIAL:
        fail("Serial numbers out of range.")

    make_record(first, color, product_type)     # for the checks
    secret = get_secret()

    if not outfile:
        outfile = f'{product_type}-{color}-{first:06d}.cbor'

    raw = build_manifest(make_records(color.strip(), product_type.strip(), first, count),
                            secret, base_url)

    with open(outfile, 'wb') as fp:
        fp.write(raw)

    click.echo(f"Wrote {count:,} tokens ({len(raw):,} bytes) to: {outfile}")

@main.command('manifest')
@click.argument('infile', type=click.File('rb'), metavar="filename.cbor")
@click.option('--tokens', '-t', is_flag=True, help="Show the tokens too")
def check_batch(infile, tokens):
    "Verify every token in a manifest file"
    from mintclaim.batch import read_manifest, check_manifest

    secret = get_secret()
    try:
        manifest = read_manifest(infile.read())
        results = list(check_manifest(manifest, secret))
    except ValueError as exc:
        fail(str(exc))

    click.echo(f"Key: {manifest['key_ident']}  Created: {manifest['created_at']}")
    click.echo(f"Links: {manifest['base_url']}")
    click.echo()

    num_bad = 0
    for (serial, color, product_type, token), ok in results:
        line = '%8d | %-4s | %s' % (serial, 'ok' if ok else 'BAD',
                    ClaimRecord(serial, color, product_type).product_id)
        if tokens:
            line += ' | ' + token
        click.echo(line)
        num_bad += (not ok)

    if num_bad:
        fail(f"{num_bad} of {len(results)} tokens did not verify.")

    click.echo(f"\nAll {len(results)} tokens verify.")

@main.command('keygen')
def new_secret():
    "Pick a new random secret key (hex)"
    click.echo(B2A(os.urandom(32)))

@main.command('ident')
def show_key_ident():
    "Show short label for the secret key in use (for comparing setups)"
    click.echo(key_ident(get_secret()))

# EOF
