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

"""
Public key parsing.
"""

import base64
import binascii
import re

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed25519, rsa

from .errors import MalformedEnvelope, MalformedKey, UnsupportedKeyType

SUPPORTED_KEY_TYPES = (
    rsa.RSAPublicKey,
    dsa.DSAPublicKey,
    ec.EllipticCurvePublicKey,
    ed25519.Ed25519PublicKey,
)

pem_re = re.compile(
    rb"-----BEGIN ([^\r\n-]+)-----\r?\n(.*?)-----END \1-----",
    re.DOTALL)


def decode_pem(data):
    """
    Return the DER contents of the first PEM block in data.  Header lines
    such as Proc-Type are skipped up to the blank line ending them.
    """
    if isinstance(data, str):
        data = data.encode('ascii', errors='replace')
    m = pem_re.search(data)
    if m is None:
        raise MalformedEnvelope("pem is invalid")
    lines = m.group(2).splitlines()
    while lines and b':' in lines[0]:
        lines.pop(0)
    body = b''.join(b''.join(lines).split())
    try:
        return base64.b64decode(body, validate=True)
    except binascii.Error as e:
        raise MalformedEnvelope("pem is invalid") from e


def parse_public_key(data):
    """
    Parse a PEM encoded SubjectPublicKeyInfo into an RSA, DSA, ECDSA or
    Ed25519 public key.
    """
    der = decode_pem(data)
    try:
        pub = serialization.load_der_public_key(der)
    except UnsupportedAlgorithm as e:
        raise UnsupportedKeyType("unknown key type: {}".format(e),
                                 key_type=None) from e
    except ValueError as e:
        raise MalformedKey("failed to parse public key: {}".format(e)) from e

    if not isinstance(pub, SUPPORTED_KEY_TYPES):
        raise UnsupportedKeyType(
            "unknown key type {}".format(type(pub).__name__),
            key_type=type(pub))
    return pub
