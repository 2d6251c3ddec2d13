from decimal import Decimal
from pathlib import Path

from web3 import Web3

#
# Filesystem
#

DEPLOYMENT_DIR = Path(__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Networks
#

LOCAL_NETWORK_NAME = "localhost"
LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local", LOCAL_NETWORK_NAME]

#
# Funds
#

# Approximate cost of deploying every component plus the whitelist drip fund
MIN_DEPLOYER_BALANCE = Web3.to_wei(Decimal("2.1"), "ether")

DEFAULT_WHITELIST_FUND = 0.5

#
# Initializers
#

REQUIRED_INITIALIZER_KEYS = ["PLANETHASH_KEY", "SPACETYPE_KEY", "BIOMEBASE_KEY"]

#
# Contracts
#

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "5.0.0"

# EIP1967 Admin slot - https://eips.ethereum.org/EIPS/eip-1967#admin-address
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103

#
# Auxiliary services
#

DEFAULT_GRAPH_NODE_ADMIN_URI = "http://localhost:8020/"
