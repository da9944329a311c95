"""Capture mechanics (simplified catch-rate formula)."""
from __future__ import annotations
from dataclasses import dataclass
import random

DEFAULT_CAPTURE_RATE = 45
MAX_CAPTURE_RATE = 255

@dataclass
class CaptureResult:
    success: bool
    shakes: int


def capture_chance(capture_rate: int, max_hp: int, current_hp: int, orb_modifier: float) -> float:
    if max_hp <= 0:
        return 1.0
    current_hp = max(0, min(current_hp, max_hp))
    # a = ((3*maxHP - 2*currentHP) * rate * orb) / (3*maxHP), capped at 255
    a = ((3*max_hp - 2*current_hp) * capture_rate * orb_modifier) / (3*max_hp)
    if a > MAX_CAPTURE_RATE: a = MAX_CAPTURE_RATE
    return a / MAX_CAPTURE_RATE


def attempt_capture(rng: random.Random, capture_rate: int, max_hp: int, current_hp: int, orb_modifier: float) -> CaptureResult:
    chance = capture_chance(capture_rate, max_hp, current_hp, orb_modifier)
    # three shake checks; all three must pass
    shakes = 0
    for _ in range(3):
        if rng.random() <= chance:
            shakes += 1
        else:
            break
    return CaptureResult(shakes == 3, shakes)

__all__ = ["attempt_capture", "capture_chance", "CaptureResult", "DEFAULT_CAPTURE_RATE"]
