"""2d6 action rolls.

A check rolls two six-sided dice, adds a modifier and compares the total
against a target of 8. The margin (the "effect") grades the outcome.
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum

import numpy as np

from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

SUCCESS_THRESHOLD = 8


class EffectOutcome(Enum):
    """Quality of a roll, graded by its effect."""
    EXCEPTIONAL_FAILURE = "exceptional_failure"  # effect <= -6
    FAILURE = "failure"                          # -5 to -1
    SUCCESS = "success"                          # 0 to +5
    EXCEPTIONAL_SUCCESS = "exceptional_success"  # effect >= +6


class Difficulty(IntEnum):
    """Task difficulty tiers and their roll modifiers."""
    SIMPLE = 6
    EASY = 4
    ROUTINE = 2
    AVERAGE = 0
    DIFFICULT = -2
    VERY_DIFFICULT = -4
    FORMIDABLE = -6


class Circumstance(IntEnum):
    """Situational bonus or penalty."""
    DISADVANTAGE = -1
    NEUTRAL = 0
    ADVANTAGE = 1


@dataclass(frozen=True)
class RollResult:
    """Breakdown of a single check."""
    die1: int
    die2: int
    modifier: int
    total: int
    succeeded: bool
    effect: int
    outcome: EffectOutcome


def classify_effect(effect):
    """Grade an effect (total minus the success threshold)."""
    if effect >= 6:
        return EffectOutcome.EXCEPTIONAL_SUCCESS
    if effect >= 0:
        return EffectOutcome.SUCCESS
    if effect <= -6:
        return EffectOutcome.EXCEPTIONAL_FAILURE
    return EffectOutcome.FAILURE


def roll_check(modifier, rng=None):
    """Roll 2d6 + modifier against the success threshold.

    Args:
        modifier: Total modifier, positive or negative.
        rng: numpy RandomState (or anything with a numpy-style
            ``randint(low, high)``, high exclusive).

    Returns:
        RollResult.
    """
    if rng is None:
        rng = np.random.RandomState()

    die1 = int(rng.randint(1, 7))
    die2 = int(rng.randint(1, 7))
    total = die1 + die2 + modifier
    effect = total - SUCCESS_THRESHOLD
    result = RollResult(
        die1=die1,
        die2=die2,
        modifier=modifier,
        total=total,
        succeeded=total >= SUCCESS_THRESHOLD,
        effect=effect,
        outcome=classify_effect(effect),
    )

    logger.debug(
        f"Roll: {die1} + {die2} + ({modifier}) = {total}. "
        f"Target: {SUCCESS_THRESHOLD}. Effect: {effect} "
        f"({result.outcome.name}). Success: {result.succeeded}")
    return result


def _lookup(enum_cls, value, field):
    """Accept an enum member or its name ("very_difficult", "VeryDifficult")."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().replace("-", "_").replace(" ", "_")
        if "_" not in key and not key.isupper():
            # CamelCase -> SNAKE_CASE
            key = "".join(f"_{c}" if c.isupper() and i else c
                          for i, c in enumerate(key))
        try:
            return enum_cls[key.upper()]
        except KeyError:
            pass
    names = ", ".join(m.name.lower() for m in enum_cls)
    raise InvalidParameterError(
        field, f"unknown value {value!r}, expected one of {names}")


def check(difficulty, additional_modifier=0,
          circumstance=Circumstance.NEUTRAL, rng=None):
    """Roll against a difficulty tier.

    The tier's modifier, ``additional_modifier`` (e.g. from a character's
    skills) and the circumstance are summed and passed to
    :func:`roll_check`.
    """
    difficulty = _lookup(Difficulty, difficulty, "difficulty")
    circumstance = _lookup(Circumstance, circumstance, "circumstance")
    modifier = int(difficulty) + additional_modifier + int(circumstance)
    return roll_check(modifier, rng=rng)
