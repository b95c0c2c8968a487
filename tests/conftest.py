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

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from gcpkms.algorithms import ALGORITHMS
from tests.constants import key_name
from tests.kms_fake import FakeKMS


@pytest.fixture(scope="session")
def private_keys():
    """One local key per curve; RSA algorithms share a 2048 bit key."""
    return {
        'rsa': rsa.generate_private_key(public_exponent=65537,
                                        key_size=2048),
        'p256': ec.generate_private_key(ec.SECP256R1()),
        'p384': ec.generate_private_key(ec.SECP384R1()),
    }


def private_key_for(private_keys, algorithm):
    name = algorithm.name
    if name.startswith('EC_SIGN_P256'):
        return private_keys['p256']
    if name.startswith('EC_SIGN_P384'):
        return private_keys['p384']
    return private_keys['rsa']


@pytest.fixture
def kms(private_keys):
    fake = FakeKMS()
    for algorithm in ALGORITHMS:
        fake.add_key(key_name(algorithm), algorithm,
                     private_key_for(private_keys, algorithm))
    return fake
