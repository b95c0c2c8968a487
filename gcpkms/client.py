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
The calls the adapters make to Cloud KMS.
"""

from google.cloud import kms_v1


class KeyManagementClient(object):
    """
    The subset of the Cloud KMS API used by Signer and Decrypter.

    Each call takes a kms_v1 request message and the Context governing
    the call, and returns the matching kms_v1 response message.
    Implementations must be safe for concurrent use.
    """
    def get_crypto_key_version(self, request, ctx):
        raise NotImplementedError

    def get_public_key(self, request, ctx):
        raise NotImplementedError

    def asymmetric_sign(self, request, ctx):
        raise NotImplementedError

    def asymmetric_decrypt(self, request, ctx):
        raise NotImplementedError


class CloudKMSClient(KeyManagementClient):
    """
    KeyManagementClient backed by kms_v1.KeyManagementServiceClient.

    The context's deadline becomes the gRPC timeout of each call.  A
    context that is already done fails the call before it is sent; a
    call already sent is bounded only by the deadline.
    """
    def __init__(self, client=None, **client_kwargs):
        if client is None:
            client = kms_v1.KeyManagementServiceClient(**client_kwargs)
        self.client = client

    def _call(self, method, request, ctx):
        ctx.check()
        kwargs = {}
        remaining = ctx.remaining()
        if remaining is not None:
            kwargs['timeout'] = remaining
        return method(request=request, **kwargs)

    def get_crypto_key_version(self, request, ctx):
        return self._call(self.client.get_crypto_key_version, request, ctx)

    def get_public_key(self, request, ctx):
        return self._call(self.client.get_public_key, request, ctx)

    def asymmetric_sign(self, request, ctx):
        return self._call(self.client.asymmetric_sign, request, ctx)

    def asymmetric_decrypt(self, request, ctx):
        return self._call(self.client.asymmetric_decrypt, request, ctx)
