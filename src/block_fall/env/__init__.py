"""Gymnasium environments for Block Fall."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .block_fall_env import BlockFallEnv

register(
    id="BlockFall-v0",
    entry_point="block_fall.env.block_fall_env:BlockFallEnv",
)

__all__ = ["BlockFallEnv"]
