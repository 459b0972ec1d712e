"""
Loot-style reward rolls for logged calls.
"""

from .roller import REWARD_POOLS, base_xp_for, roll_reward

__all__ = ["REWARD_POOLS", "base_xp_for", "roll_reward"]
