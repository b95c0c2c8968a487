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
Errors raised by the KMS adapters.

Every error wrapping a failure of the KMS client or of the key parser is
raised with ``raise ... from err``, so the underlying error is available
as ``__cause__``.
"""


class KMSError(Exception):
    """Base class for all errors raised by gcpkms."""
    pass


class InvalidArgument(KMSError, ValueError):
    pass


class RemoteLookupFailed(KMSError):
    """Fetching the key version or its public key from KMS failed."""
    pass


class UnsupportedAlgorithm(KMSError):
    def __init__(self, message, algorithm):
        super().__init__(message)
        self.algorithm = algorithm


class UnsupportedSigningAlgorithm(UnsupportedAlgorithm):
    pass


class UnsupportedDecryptionAlgorithm(UnsupportedAlgorithm):
    pass


class PublicKeyError(KMSError):
    pass


class MalformedEnvelope(PublicKeyError):
    """No PEM block could be decoded."""
    pass


class MalformedKey(PublicKeyError):
    """The PEM block does not hold a SubjectPublicKeyInfo structure."""
    pass


class UnsupportedKeyType(PublicKeyError):
    def __init__(self, message, key_type):
        super().__init__(message)
        self.key_type = key_type


class PublicKeyParseFailed(KMSError):
    pass


class WrongHashFunction(KMSError):
    def __init__(self, expected, actual):
        super().__init__(
            "requested hash function {} does not match the key's "
            "digest algorithm {}".format(actual, expected))
        self.expected = expected
        self.actual = actual


class WrongDigestLength(KMSError):
    def __init__(self, expected, actual):
        super().__init__(
            "digest is {} bytes, expected {} bytes".format(actual, expected))
        self.expected = expected
        self.actual = actual


class RemoteSignFailed(KMSError):
    pass


class RemoteDecryptFailed(KMSError):
    pass
