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
Cloud KMS asymmetric keys as signers and decrypters.
"""

gcpkms_version = "0.1.0"

from .client import CloudKMSClient, KeyManagementClient  # noqa: E402
from .context import (  # noqa: E402
    Cancelled, Context, ContextError, DeadlineExceeded, background,
    with_cancel, with_timeout)
from .decrypter import Decrypter, new_decrypter  # noqa: E402
from .errors import *  # noqa: E402,F401,F403
from .pubkey import parse_public_key  # noqa: E402
from .signer import Signer, new_signer  # noqa: E402
