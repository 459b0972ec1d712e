"""
Reward roller for logged calls.

A roll is a pure function of the outcome and a random source. Callers pass
a seeded random.Random in tests; production uses the module-level default.
"""

import random

from app.features.dialer.domain import RewardRoll

TIER_COMMON = "common"
TIER_UNCOMMON = "uncommon"
TIER_RARE = "rare"
TIER_EPIC = "epic"
TIER_LEGENDARY = "legendary"

BASE_XP: dict[str, int] = {
    "pledged": 50,
    "good_conversation": 50,
    "no_answer": 20,
    "left_message": 20,
    "bad_timing": 30,
}
DEFAULT_BASE_XP = 20

HIT_RATE = 0.70
LEGENDARY_ON_MISS_RATE = 0.05
LEGENDARY_ON_MISS_MULTIPLIER = 5

# (upper bound on the roll, value); first match wins
MULTIPLIER_THRESHOLDS: tuple[tuple[float, int], ...] = (
    (0.05, 5),
    (0.15, 3),
    (0.35, 2),
)
TIER_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (0.01, TIER_LEGENDARY),
    (0.05, TIER_EPIC),
    (0.20, TIER_RARE),
    (0.50, TIER_UNCOMMON),
)

REWARD_POOLS: dict[str, tuple[str, ...]] = {
    TIER_COMMON: (
        "☕ Coffee break (5 min)",
        "🍫 Grab a snack",
        "📱 5 min scroll time",
        "🚶 Quick stretch",
        "💧 Get some water",
    ),
    TIER_UNCOMMON: (
        "📱 15 min free time",
        "☕ Fancy coffee, you earned it",
        "🎵 Blast your favorite song",
        "🍕 Good lunch today",
    ),
    TIER_RARE: (
        "🎮 30 min gaming / TV tonight",
        "🍣 Nice lunch out",
        "🛍️ Small treat, up to $20",
        "🎬 Movie tonight",
    ),
    TIER_EPIC: (
        "🍽️ Nice dinner out",
        "🛍️ Shopping trip, $50",
        "🎁 Buy yourself something good",
    ),
    TIER_LEGENDARY: (
        "🏆 Take a half day, you crushed it",
        "✈️ Plan a weekend away",
        "🛍️ Big splurge, $100+",
    ),
}

_default_rng = random.Random()


def base_xp_for(outcome: str) -> int:
    return BASE_XP.get(outcome, DEFAULT_BASE_XP)


def pick_multiplier(roll: float) -> int:
    for bound, multiplier in MULTIPLIER_THRESHOLDS:
        if roll < bound:
            return multiplier
    return 1


def pick_tier(roll: float) -> str:
    for bound, tier in TIER_THRESHOLDS:
        if roll < bound:
            return tier
    return TIER_COMMON


def roll_reward(outcome: str, rng: random.Random | None = None) -> RewardRoll:
    """
    Roll the XP multiplier and loot drop for one logged call.

    A hit rolls the multiplier and the tier independently, so a common drop
    can still carry a x5 multiplier. A miss gets one more roll for a
    legendary override; otherwise it awards base XP with no loot.

    Args:
        outcome: Call outcome; unknown outcomes use the default base XP
        rng: Random source (defaults to a module-level generator)

    Returns:
        RewardRoll with the base XP, multiplier, tier and loot text
    """
    rng = rng or _default_rng
    base_xp = base_xp_for(outcome)

    if rng.random() >= HIT_RATE:
        if rng.random() < LEGENDARY_ON_MISS_RATE:
            return RewardRoll(
                base_xp=base_xp,
                xp_multiplier=LEGENDARY_ON_MISS_MULTIPLIER,
                tier=TIER_LEGENDARY,
                reward_text=rng.choice(REWARD_POOLS[TIER_LEGENDARY]),
            )
        return RewardRoll(base_xp=base_xp)

    multiplier = pick_multiplier(rng.random())
    tier = pick_tier(rng.random())
    return RewardRoll(
        base_xp=base_xp,
        xp_multiplier=multiplier,
        tier=tier,
        reward_text=rng.choice(REWARD_POOLS[tier]),
    )
