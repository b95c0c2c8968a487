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
Common parts of the KMS backed keys.
"""

from cryptography.hazmat.primitives import serialization
from google.cloud import kms_v1

from .algorithms import algorithm_name
from .context import ContextSlot, background
from .errors import (
    InvalidArgument, PublicKeyError, PublicKeyParseFailed, RemoteLookupFailed)
from .pubkey import parse_public_key


def check_client(client):
    if client is None:
        raise InvalidArgument("kms client cannot be nil")


def construction_context(ctx):
    return background() if ctx is None else ctx


def fetch_public_key(client, name, ctx):
    """Return the kms_v1.PublicKey of the key version name."""
    try:
        return client.get_public_key(kms_v1.GetPublicKeyRequest(name=name),
                                     ctx)
    except Exception as e:
        raise RemoteLookupFailed(
            "failed to lookup key {}: failed to fetch public key: {}".format(
                name, e)) from e


def load_public_key(pem):
    try:
        return parse_public_key(pem)
    except PublicKeyError as e:
        raise PublicKeyParseFailed(
            "failed to parse public key: {}".format(e)) from e


class KMSKey(object):
    """
    A key version held by Cloud KMS.

    Only the key name, its algorithm and its public key live here; the
    private half never leaves KMS.
    """
    def __init__(self, client, key_id, algorithm, public_key):
        self._client = client
        self._key_id = key_id
        self._algorithm = algorithm
        self._public_key = public_key
        self._ctx = ContextSlot()

    @property
    def key_id(self):
        return self._key_id

    @property
    def algorithm(self):
        return self._algorithm

    def public(self):
        return self._public_key

    def with_context(self, ctx):
        """
        Set the context used by later operations on this key.  Normally
        it would be an argument of sign or decrypt, but their interface
        does not take one.  None restores the background context.
        """
        self._ctx.set(ctx)
        return self

    def context(self):
        return self._ctx.get()

    def get_public_bytes(self):
        return self._public_key.public_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PublicFormat.SubjectPublicKeyInfo)

    def get_public_pem(self):
        return self._public_key.public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo)

    def __repr__(self):
        return "<{} {} {}>".format(type(self).__name__, self._key_id,
                                   algorithm_name(self._algorithm))
