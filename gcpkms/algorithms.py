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
KMS key version algorithms and the parameters each one implies.
"""

from collections import namedtuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, utils
from google.cloud import kms_v1

from .errors import UnsupportedSigningAlgorithm, UnsupportedDecryptionAlgorithm

Algorithm = kms_v1.CryptoKeyVersion.CryptoKeyVersionAlgorithm

SIGN = 'sign'
DECRYPT = 'decrypt'

AlgorithmInfo = namedtuple('AlgorithmInfo', ['purpose', 'scheme', 'hash'])

ALGORITHMS = {
    Algorithm.RSA_SIGN_PSS_2048_SHA256: AlgorithmInfo(SIGN, 'pss', hashes.SHA256),
    Algorithm.RSA_SIGN_PSS_3072_SHA256: AlgorithmInfo(SIGN, 'pss', hashes.SHA256),
    Algorithm.RSA_SIGN_PSS_4096_SHA256: AlgorithmInfo(SIGN, 'pss', hashes.SHA256),
    Algorithm.RSA_SIGN_PSS_4096_SHA512: AlgorithmInfo(SIGN, 'pss', hashes.SHA512),
    Algorithm.RSA_SIGN_PKCS1_2048_SHA256: AlgorithmInfo(SIGN, 'pkcs1', hashes.SHA256),
    Algorithm.RSA_SIGN_PKCS1_3072_SHA256: AlgorithmInfo(SIGN, 'pkcs1', hashes.SHA256),
    Algorithm.RSA_SIGN_PKCS1_4096_SHA256: AlgorithmInfo(SIGN, 'pkcs1', hashes.SHA256),
    Algorithm.RSA_SIGN_PKCS1_4096_SHA512: AlgorithmInfo(SIGN, 'pkcs1', hashes.SHA512),
    Algorithm.EC_SIGN_P256_SHA256: AlgorithmInfo(SIGN, 'ecdsa', hashes.SHA256),
    Algorithm.EC_SIGN_P384_SHA384: AlgorithmInfo(SIGN, 'ecdsa', hashes.SHA384),
    Algorithm.RSA_DECRYPT_OAEP_2048_SHA256: AlgorithmInfo(DECRYPT, 'oaep', hashes.SHA256),
    Algorithm.RSA_DECRYPT_OAEP_3072_SHA256: AlgorithmInfo(DECRYPT, 'oaep', hashes.SHA256),
    Algorithm.RSA_DECRYPT_OAEP_4096_SHA256: AlgorithmInfo(DECRYPT, 'oaep', hashes.SHA256),
    Algorithm.RSA_DECRYPT_OAEP_4096_SHA512: AlgorithmInfo(DECRYPT, 'oaep', hashes.SHA512),
}


def algorithm_name(algorithm):
    try:
        return Algorithm(algorithm).name
    except ValueError:
        return str(algorithm)


def _lookup(algorithm, purpose):
    info = ALGORITHMS.get(algorithm)
    if info is None or info.purpose != purpose:
        return None
    return info


def signing_info(algorithm):
    info = _lookup(algorithm, SIGN)
    if info is None:
        raise UnsupportedSigningAlgorithm(
            "unknown signing algorithm {}".format(algorithm_name(algorithm)),
            algorithm)
    return info


def decryption_info(algorithm):
    info = _lookup(algorithm, DECRYPT)
    if info is None:
        raise UnsupportedDecryptionAlgorithm(
            "unknown decryption algorithm {}".format(algorithm_name(algorithm)),
            algorithm)
    return info


def digest_payload(hash_alg, digest):
    """Wrap digest in the Digest field matching hash_alg"""
    return kms_v1.Digest(**{hash_alg.name: digest})


def signature_parameters(info):
    """Return (padding, algorithm) to verify a prehashed signature.

    padding is None for ECDSA, whose algorithm argument carries the hash.
    """
    prehashed = utils.Prehashed(info.hash())
    if info.scheme == 'pss':
        # KMS uses a salt as long as the digest
        return (padding.PSS(mgf=padding.MGF1(info.hash()),
                            salt_length=padding.PSS.DIGEST_LENGTH),
                prehashed)
    elif info.scheme == 'pkcs1':
        return padding.PKCS1v15(), prehashed
    elif info.scheme == 'ecdsa':
        return None, ec.ECDSA(prehashed)
    raise ValueError("{} is not a signature scheme".format(info.scheme))


def oaep_padding(info):
    if info.scheme != 'oaep':
        raise ValueError("{} is not an encryption scheme".format(info.scheme))
    return padding.OAEP(mgf=padding.MGF1(algorithm=info.hash()),
                        algorithm=info.hash(),
                        label=None)
