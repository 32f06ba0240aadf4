"""Protocol constants for concentrated-liquidity swap simulation.

Integer widths, Q-format scaling factors, tick/price domain bounds and the
standard fee tiers. All values match the on-chain reference exactly.
"""

# Integer widths
UINT128_MAX = 2**128 - 1
UINT160_MAX = 2**160 - 1
UINT256_MAX = 2**256 - 1
INT128_MIN = -(2**127)
INT128_MAX = 2**127 - 1
INT256_MIN = -(2**255)
INT256_MAX = 2**255 - 1

# Fixed-point resolutions
RESOLUTION_96 = 96
Q96 = 1 << RESOLUTION_96
Q128 = 1 << 128

# Tick domain: log base 1.0001 of 2**-128 and 2**128
MIN_TICK = -887272
MAX_TICK = -MIN_TICK

# Sqrt price domain: get_sqrt_ratio_at_tick(MIN_TICK) and get_sqrt_ratio_at_tick(MAX_TICK)
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

# Bitmap word range (int16 word positions for tick spacing 1)
MIN_WORD_POS = MIN_TICK >> 8
MAX_WORD_POS = MAX_TICK >> 8

# Fees are in hundredths of a basis point: 1_000_000 = 100%
FEE_DENOMINATOR = 1_000_000

FEE_LOWEST = 100  # 0.01% - stable pairs
FEE_LOW = 500  # 0.05% - stable pairs
FEE_MEDIUM = 3000  # 0.30% - most pairs
FEE_HIGH = 10000  # 1.00% - exotic pairs

# Tick spacing per fee tier
TICK_SPACING = {
    FEE_LOWEST: 1,
    FEE_LOW: 10,
    FEE_MEDIUM: 60,
    FEE_HIGH: 200,
}

__all__ = [
    "UINT128_MAX",
    "UINT160_MAX",
    "UINT256_MAX",
    "INT128_MIN",
    "INT128_MAX",
    "INT256_MIN",
    "INT256_MAX",
    "RESOLUTION_96",
    "Q96",
    "Q128",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "MIN_WORD_POS",
    "MAX_WORD_POS",
    "FEE_DENOMINATOR",
    "FEE_LOWEST",
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "TICK_SPACING",
]
