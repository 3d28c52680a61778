"""Protocol constants for the pair engine.

Centralizes bit widths, fixed economic parameters and well-known addresses.
"""

from eth_utils import keccak

from pairpool.models.types import is_valid_address

# Reserve and timestamp widths
UINT32_MODULUS = 2**32
UINT112_MAX = 2**112 - 1
UINT224_MAX = 2**224 - 1
UINT256_MODULUS = 2**256

# UQ112x112 fixed-point scale (112 fractional bits)
Q112 = 2**112

# Liquidity permanently locked on the first deposit
MINIMUM_LIQUIDITY = 10**3

# Swap and flash-loan fee: 3 / 1000 = 0.3%, taken on the input side
FEE_NUMERATOR = 3
FEE_DENOMINATOR = 1000

# Fee recipient receives 1 / (PROTOCOL_FEE_DIVISOR + 1) of sqrt(k) growth
PROTOCOL_FEE_DIVISOR = 5

# Claim token metadata
CLAIM_TOKEN_NAME = "Uniswap V2"
CLAIM_TOKEN_SYMBOL = "UNI-V2"
CLAIM_TOKEN_DECIMALS = 18


def _validate_address(name: str, address: str) -> str:
    """Validate and return an address constant.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# MINIMUM_LIQUIDITY is minted here; nobody holds its key
ZERO_ADDRESS = _validate_address("zero", "0x0000000000000000000000000000000000000000")
BURN_ADDRESS = ZERO_ADDRESS

# Mainnet UniswapV2Factory and the pair init code hash used for CREATE2
MAINNET_FACTORY = _validate_address("factory", "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f")
PAIR_INIT_CODE_HASH = bytes.fromhex(
    "96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"
)

# Value a flash borrower must return from on_flash_loan (ERC-3156)
CALLBACK_SUCCESS = keccak(text="ERC3156FlashBorrower.onFlashLoan")
