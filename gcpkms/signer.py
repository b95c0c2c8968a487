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
Signing with Cloud KMS asymmetric signing keys.
"""

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import utils
from google.cloud import kms_v1

from .algorithms import digest_payload, signature_parameters, signing_info
from .errors import (
    InvalidArgument, RemoteSignFailed, WrongDigestLength, WrongHashFunction)
from .general import (
    KMSKey, check_client, construction_context, fetch_public_key,
    load_public_key)


def new_signer(client, key_id, ctx=None):
    """
    Create a Signer for the key version key_id, which must be in the
    format projects/p/locations/l/keyRings/r/cryptoKeys/k/cryptoKeyVersions/v.

    ctx only governs the calls made here.
    """
    check_client(client)
    ctx = construction_context(ctx)

    pk = fetch_public_key(client, key_id, ctx)
    # Verify it's a key used for signing
    signing_info(pk.algorithm)
    public_key = load_public_key(pk.pem)

    return Signer(client, key_id, pk.algorithm, public_key)


def _hash_of(value):
    if isinstance(value, utils.Prehashed):
        # Prehashed only exposes the wrapped hash privately
        value = value._algorithm
    if isinstance(value, hashes.HashAlgorithm):
        return value
    return None


def requested_hash(opts):
    """Return the hash algorithm named by signing options.

    opts may be a hash algorithm, a Prehashed wrapper, or carry either
    as its algorithm attribute, as ec.ECDSA does.
    """
    algorithm = _hash_of(opts)
    if algorithm is None:
        algorithm = _hash_of(getattr(opts, 'algorithm', None))
    if algorithm is not None:
        return algorithm
    raise InvalidArgument(
        "signer options {!r} do not name a hash algorithm".format(opts))


class Signer(KMSKey):
    """
    Signs digests with a Cloud KMS key version.
    """
    def __init__(self, client, key_id, algorithm, public_key):
        super().__init__(client, key_id, algorithm, public_key)
        self._info = signing_info(algorithm)
        self._digest_alg = self._info.hash()

    def digest_alg(self):
        """The hash the digests passed to sign must be computed with."""
        return self._digest_alg

    def _check_digest(self, digest, opts):
        if opts is not None:
            requested = requested_hash(opts)
            if requested.name != self._digest_alg.name:
                raise WrongHashFunction(expected=self._digest_alg.name,
                                        actual=requested.name)
        if len(digest) != self._digest_alg.digest_size:
            raise WrongDigestLength(expected=self._digest_alg.digest_size,
                                    actual=len(digest))

    def sign(self, digest, opts=None):
        """
        Sign digest using the context set by with_context.  opts may be a
        hash algorithm or a Prehashed wrapper, or an object carrying one
        as its algorithm attribute, and must then match digest_alg().
        """
        self._check_digest(digest, opts)
        return self._sign(self.context(), digest)

    def sign_with_context(self, ctx, digest, opts=None):
        self._check_digest(digest, opts)
        return self._sign(ctx, digest)

    def _sign(self, ctx, digest):
        request = kms_v1.AsymmetricSignRequest(
            name=self._key_id,
            digest=digest_payload(self._digest_alg, bytes(digest)))
        try:
            resp = self._client.asymmetric_sign(request, ctx)
        except Exception as e:
            raise RemoteSignFailed("failed to sign: {}".format(e)) from e
        return resp.signature

    def verify(self, signature, digest):
        """Verify that signature is valid for the given digest"""
        self._check_digest(digest, None)
        pad, algorithm = signature_parameters(self._info)
        try:
            if pad is None:
                self._public_key.verify(signature, digest, algorithm)
            else:
                self._public_key.verify(signature, digest, pad, algorithm)
        except InvalidSignature:
            return False
        return True
