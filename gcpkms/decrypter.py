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
Decryption with Cloud KMS RSA-OAEP keys.
"""

from google.cloud import kms_v1

from .algorithms import decryption_info, oaep_padding
from .errors import RemoteDecryptFailed, RemoteLookupFailed
from .general import (
    KMSKey, check_client, construction_context, fetch_public_key,
    load_public_key)


def new_decrypter(client, key_id, ctx=None):
    """
    Create a Decrypter for the key version key_id, which must be in the
    format projects/p/locations/l/keyRings/r/cryptoKeys/k/cryptoKeyVersions/v.

    ctx only governs the calls made here.
    """
    check_client(client)
    ctx = construction_context(ctx)

    try:
        ckv = client.get_crypto_key_version(
            kms_v1.GetCryptoKeyVersionRequest(name=key_id), ctx)
    except Exception as e:
        raise RemoteLookupFailed(
            "failed to lookup key {}: {}".format(key_id, e)) from e

    # Verify it's a key used for decryption
    decryption_info(ckv.algorithm)

    pk = fetch_public_key(client, ckv.name or key_id, ctx)
    public_key = load_public_key(pk.pem)

    return Decrypter(client, key_id, ckv.algorithm, public_key)


class Decrypter(KMSKey):
    """
    Decrypts RSA-OAEP ciphertexts with a Cloud KMS key version.

    The algorithm is only checked when the Decrypter is created; KMS
    rejects ciphertexts for a key version that no longer decrypts.
    """
    def __init__(self, client, key_id, algorithm, public_key):
        super().__init__(client, key_id, algorithm, public_key)
        self._info = decryption_info(algorithm)

    def decrypt(self, ciphertext, opts=None):
        """Decrypt ciphertext using the context set by with_context.
        opts is ignored."""
        return self._decrypt(self.context(), ciphertext)

    def decrypt_with_context(self, ctx, ciphertext, opts=None):
        return self._decrypt(ctx, ciphertext)

    def _decrypt(self, ctx, ciphertext):
        request = kms_v1.AsymmetricDecryptRequest(
            name=self._key_id,
            ciphertext=bytes(ciphertext))
        try:
            resp = self._client.asymmetric_decrypt(request, ctx)
        except Exception as e:
            raise RemoteDecryptFailed(
                "failed to decrypt ciphertext: {}".format(e)) from e
        return resp.plaintext

    def encrypt(self, plaintext):
        """Encrypt plaintext locally so that only KMS can decrypt it."""
        return self._public_key.encrypt(plaintext, oaep_padding(self._info))
