#! /usr/bin/env python3
#
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import base64
import functools
import sys

import click
from cryptography.hazmat.primitives import hashes

from gcpkms import gcpkms_version
from .client import CloudKMSClient
from .context import background, with_timeout
from .decrypter import new_decrypter
from .errors import KMSError, UnsupportedSigningAlgorithm
from .signer import new_signer

MIN_PYTHON_VERSION = (3, 7)
if sys.version_info < MIN_PYTHON_VERSION:
    sys.exit("Python %s.%s or newer is required by gcpkms."
             % MIN_PYTHON_VERSION)

valid_encodings = ['pem', 'raw']


def make_client(endpoint=None):
    kwargs = {}
    if endpoint:
        kwargs['client_options'] = {'api_endpoint': endpoint}
    return CloudKMSClient(**kwargs)


def make_context(timeout):
    if timeout:
        return with_timeout(timeout)
    return background()


def load_signature(sigfile):
    return base64.b64decode(sigfile.read())


def save_signature(sigfile, sig):
    sigfile.write(base64.b64encode(sig))


def kms_options(f):
    """Options shared by every command that talks to KMS"""
    @click.option('--timeout', metavar='seconds', type=float,
                  envvar='GCPKMS_TIMEOUT',
                  help='Deadline for all KMS calls made by the command')
    @click.option('--endpoint', metavar='host', envvar='GCPKMS_ENDPOINT',
                  help='KMS API endpoint, e.g. a regional endpoint')
    @click.option('-k', '--key', metavar='name', required=True,
                  envvar='GCPKMS_KEY',
                  help='Key version, projects/p/locations/l/keyRings/r/'
                       'cryptoKeys/k/cryptoKeyVersions/v')
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except KMSError as e:
            raise click.ClickException(str(e))
    return wrapper


def open_signer(key, endpoint, timeout):
    ctx = make_context(timeout)
    return new_signer(make_client(endpoint), key, ctx).with_context(ctx)


def open_decrypter(key, endpoint, timeout):
    ctx = make_context(timeout)
    return new_decrypter(make_client(endpoint), key, ctx).with_context(ctx)


def open_key(key, endpoint, timeout):
    """Open key as a signer, falling back to a decrypter."""
    ctx = make_context(timeout)
    client = make_client(endpoint)
    try:
        return new_signer(client, key, ctx)
    except UnsupportedSigningAlgorithm:
        return new_decrypter(client, key, ctx)


def digest(signer, infile):
    h = hashes.Hash(signer.digest_alg())
    h.update(infile.read())
    return h.finalize()


@click.option('-o', '--output', metavar='output', type=click.File('wb'),
              default='-',
              help='Specify the output file\'s name. '
                   'The stdout is used if it is not provided.')
@click.option('-e', '--encoding', metavar='encoding', default='pem',
              type=click.Choice(valid_encodings),
              help='Valid encodings: {}'.format(', '.join(valid_encodings)))
@click.command(help='Dump the public key of a key version')
@kms_options
def getpub(key, endpoint, timeout, encoding, output):
    k = open_key(key, endpoint, timeout)
    if encoding == 'pem':
        output.write(k.get_public_pem())
    else:
        output.write(k.get_public_bytes())


@click.argument('infile', type=click.File('rb'))
@click.option('-o', '--output', metavar='sigfile', type=click.File('wb'),
              default='-',
              help='Write the base64 signature to this file instead of '
                   'stdout')
@click.command(help='Hash a file and sign the digest with KMS')
@kms_options
def sign(key, endpoint, timeout, output, infile):
    signer = open_signer(key, endpoint, timeout)
    save_signature(output, signer.sign(digest(signer, infile)))


@click.argument('infile', type=click.File('rb'))
@click.option('-s', '--sig', metavar='sigfile', type=click.File('rb'),
              required=True, help='Base64 signature of infile')
@click.command(help='Check a signature against the public key of a key '
                    'version')
@kms_options
def verify(key, endpoint, timeout, sig, infile):
    signer = open_signer(key, endpoint, timeout)
    if signer.verify(load_signature(sig), digest(signer, infile)):
        print("Signature is valid")
        return
    print("Invalid signature")
    sys.exit(1)


@click.argument('infile', type=click.File('rb'))
@click.option('-o', '--output', metavar='output', type=click.File('wb'),
              default='-',
              help='Write the base64 ciphertext to this file instead of '
                   'stdout')
@click.command(help='Encrypt a file with the public key of a key version')
@kms_options
def encrypt(key, endpoint, timeout, output, infile):
    decrypter = open_decrypter(key, endpoint, timeout)
    try:
        ciphertext = decrypter.encrypt(infile.read())
    except ValueError as e:
        raise click.UsageError("{}".format(e))
    output.write(base64.b64encode(ciphertext))


@click.argument('infile', type=click.File('rb'))
@click.option('-o', '--output', metavar='output', type=click.File('wb'),
              default='-',
              help='Write the plaintext to this file instead of stdout')
@click.command(help='Decrypt a base64 ciphertext with KMS')
@kms_options
def decrypt(key, endpoint, timeout, output, infile):
    decrypter = open_decrypter(key, endpoint, timeout)
    output.write(decrypter.decrypt(base64.b64decode(infile.read())))


@click.command(help='Print gcpkms version information')
def version():
    print(gcpkms_version)


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
def gcpkms():
    pass


gcpkms.add_command(getpub)
gcpkms.add_command(sign)
gcpkms.add_command(verify)
gcpkms.add_command(encrypt)
gcpkms.add_command(decrypt)
gcpkms.add_command(version)


if __name__ == '__main__':
    gcpkms()
