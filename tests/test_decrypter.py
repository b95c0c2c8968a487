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

import threading

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from google.api_core import exceptions

from gcpkms import new_decrypter
from gcpkms.algorithms import Algorithm
from gcpkms.context import Cancelled, background, with_cancel
from gcpkms.errors import (
    InvalidArgument, PublicKeyParseFailed, RemoteDecryptFailed,
    RemoteLookupFailed, UnsupportedDecryptionAlgorithm)
from tests.constants import (
    DECRYPTER_KEY, DECRYPTION_ALGORITHMS, MISSING_KEY, SIGNER_KEY, key_name)


def oaep(hash_cls):
    return padding.OAEP(mgf=padding.MGF1(algorithm=hash_cls()),
                        algorithm=hash_cls(), label=None)


class TestNewDecrypter:

    def test_nil_client(self):
        with pytest.raises(InvalidArgument) as excinfo:
            new_decrypter(None, DECRYPTER_KEY)
        assert "cannot be nil" in str(excinfo.value)

    def test_bad_key(self, kms):
        with pytest.raises(RemoteLookupFailed) as excinfo:
            new_decrypter(kms, MISSING_KEY)
        assert "failed to lookup key" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, exceptions.NotFound)
        assert kms.methods() == ['get_crypto_key_version']

    def test_ok(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        assert decrypter.key_id == DECRYPTER_KEY
        assert decrypter.algorithm == Algorithm.RSA_DECRYPT_OAEP_4096_SHA512
        assert kms.methods() == ['get_crypto_key_version', 'get_public_key']

    def test_signing_key(self, kms):
        with pytest.raises(UnsupportedDecryptionAlgorithm) as excinfo:
            new_decrypter(kms, SIGNER_KEY)
        assert "unknown decryption algorithm" in str(excinfo.value)
        # The public key is never fetched for the wrong kind of key
        assert kms.methods() == ['get_crypto_key_version']

    def test_public_key_lookup_fails(self, kms):
        def fail(request, ctx):
            raise exceptions.PermissionDenied("denied")
        kms.get_public_key = fail
        with pytest.raises(RemoteLookupFailed) as excinfo:
            new_decrypter(kms, DECRYPTER_KEY)
        assert "failed to fetch public key" in str(excinfo.value)

    def test_unparsable_public_key(self, kms):
        kms.set_pem(DECRYPTER_KEY, "-----BEGIN PUBLIC KEY-----\n"
                                   "AAAA\n-----END PUBLIC KEY-----\n")
        with pytest.raises(PublicKeyParseFailed):
            new_decrypter(kms, DECRYPTER_KEY)


class TestDecrypterAccessors:

    def test_with_context(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        ctx = with_cancel()
        assert decrypter.with_context(ctx) is decrypter
        assert decrypter.context() is ctx
        decrypter.with_context(None)
        assert decrypter.context() is background()

    def test_public(self, kms, private_keys):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        public_key = decrypter.public()
        assert isinstance(public_key, rsa.RSAPublicKey)
        assert decrypter.public() is public_key
        assert public_key.public_numbers() == \
            private_keys['rsa'].public_key().public_numbers()


class TestDecrypt:

    def test_decrypt(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        msg = b"my message to encrypt"
        ciphertext = decrypter.public().encrypt(msg, oaep(hashes.SHA512))

        assert decrypter.decrypt(ciphertext) == msg
        _, request, _ = kms.calls[-1]
        assert request.name == DECRYPTER_KEY
        assert request.ciphertext == ciphertext

    @pytest.mark.parametrize("algorithm", DECRYPTION_ALGORITHMS)
    @pytest.mark.parametrize("msg", [b"", b"x", b"\x00" * 62])
    def test_round_trip(self, kms, algorithm, msg):
        decrypter = new_decrypter(kms, key_name(algorithm))
        assert decrypter.decrypt(decrypter.encrypt(msg)) == msg

    def test_opts_ignored(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        ciphertext = decrypter.encrypt(b"abc")
        assert decrypter.decrypt(ciphertext, object()) == b"abc"

    def test_remote_failure(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        with pytest.raises(RemoteDecryptFailed) as excinfo:
            decrypter.decrypt(b"not a ciphertext")
        assert "failed to decrypt ciphertext" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, exceptions.InvalidArgument)

    def test_decrypt_with_context(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        ctx = with_cancel()
        assert decrypter.decrypt_with_context(
            ctx, decrypter.encrypt(b"abc")) == b"abc"
        assert kms.calls[-1][2] is ctx
        assert decrypter.context() is background()

    def test_context_swap(self, kms):
        """
        A context installed while a call is in flight is only seen by
        later calls.
        """
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        ciphertext = decrypter.encrypt(b"in flight")
        first = with_cancel()
        second = with_cancel()
        kms.release = threading.Event()
        result = {}

        def run():
            try:
                result['plaintext'] = decrypter.decrypt(ciphertext)
            except RemoteDecryptFailed as e:
                result['error'] = e

        decrypter.with_context(first)
        t = threading.Thread(target=run)
        t.start()
        assert kms.started.wait(5)
        decrypter.with_context(second)

        # Cancelling the new context leaves the in-flight call running
        second.cancel()
        t.join(0.1)
        assert t.is_alive()

        first.cancel()
        t.join(5)
        assert not t.is_alive()
        assert 'plaintext' not in result
        assert isinstance(result['error'].__cause__, Cancelled)

        # Later calls use the second context
        assert kms.calls[-1][2] is first
        with pytest.raises(RemoteDecryptFailed):
            decrypter.decrypt(ciphertext)
        assert kms.calls[-1][2] is second

    def test_context_swap_completes(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        ciphertext = decrypter.encrypt(b"in flight")
        first = with_cancel()
        kms.release = threading.Event()
        result = {}

        def run():
            result['plaintext'] = decrypter.decrypt(ciphertext)

        decrypter.with_context(first)
        t = threading.Thread(target=run)
        t.start()
        assert kms.started.wait(5)
        decrypter.with_context(with_cancel()).context().cancel()
        kms.release.set()
        t.join(5)
        assert result['plaintext'] == b"in flight"

    def test_concurrent_decrypts(self, kms):
        decrypter = new_decrypter(kms, DECRYPTER_KEY)
        messages = [("message %d" % i).encode() for i in range(8)]
        ciphertexts = [decrypter.encrypt(m) for m in messages]
        results = [None] * len(messages)

        def run(i):
            results[i] = decrypter.decrypt(ciphertexts[i])

        threads = [threading.Thread(target=run, args=(i,))
                   for i in range(len(messages))]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results == messages
