from __future__ import annotations

"""Default badge and synergy catalog data.

Plain data only; ``badges.catalog.default_catalog()`` validates it once and
builds the immutable lookup tables.
"""

from typing import Any, Dict, List


def _tiers(key: str, bronze: float, silver: float, gold: float, hof: float) -> Dict[str, Dict[str, float]]:
    return {
        "bronze": {key: bronze},
        "silver": {key: silver},
        "gold": {key: gold},
        "hof": {key: hof},
    }


DEFAULT_BADGES: List[Dict[str, Any]] = [
    # --- finishing ---
    {"id": "acrobat", "name": "Acrobat", "category": "finishing",
     "effects": _tiers("contestedLayupBoost", 0.03, 0.06, 0.10, 0.15)},
    {"id": "contact_finisher", "name": "Contact Finisher", "category": "finishing",
     "effects": _tiers("contactFinishBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "giant_slayer", "name": "Giant Slayer", "category": "finishing",
     "effects": _tiers("giantSlayerBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "floater_specialist", "name": "Floater Specialist", "category": "finishing",
     "effects": _tiers("floaterBoost", 0.04, 0.08, 0.13, 0.18)},
    {"id": "physical_finisher", "name": "Physical Finisher", "category": "finishing",
     "effects": _tiers("contactFinishBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "paint_prodigy", "name": "Paint Prodigy", "category": "finishing",
     "effects": _tiers("paintScoringBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "post_fade_phenom", "name": "Post Fade Phenom", "category": "finishing",
     "effects": _tiers("postFadeBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "post_powerhouse", "name": "Post Powerhouse", "category": "finishing",
     "effects": _tiers("postStrengthBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "post_up_poet", "name": "Post-Up Poet", "category": "finishing",
     "effects": _tiers("postMoveBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "hook_specialist", "name": "Hook Specialist", "category": "finishing",
     "effects": _tiers("hookShotBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "pick_and_roller", "name": "Pick & Roller", "category": "finishing",
     "effects": _tiers("rollerFinishBoost", 0.03, 0.06, 0.09, 0.13)},
    {"id": "lob_city_finisher", "name": "Lob City Finisher", "category": "finishing",
     "effects": _tiers("alleyOopFinishBoost", 0.08, 0.15, 0.22, 0.30)},
    # --- shooting ---
    {"id": "catch_and_shoot", "name": "Catch & Shoot", "category": "shooting",
     "effects": _tiers("catchShootBoost", 0.03, 0.06, 0.10, 0.15)},
    {"id": "corner_specialist", "name": "Corner Specialist", "category": "shooting",
     "effects": _tiers("cornerThreeBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "deadeye", "name": "Deadeye", "category": "shooting",
     "effects": _tiers("contestReduction", 0.08, 0.15, 0.22, 0.30)},
    {"id": "deep_threes", "name": "Deep Threes", "category": "shooting",
     "effects": _tiers("deepRangeBoost", 0.03, 0.06, 0.10, 0.15)},
    {"id": "limitless_range", "name": "Limitless Range", "category": "shooting",
     "effects": _tiers("deepRangeBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "difficult_shots", "name": "Difficult Shots", "category": "shooting",
     "effects": _tiers("movingShotBoost", 0.03, 0.06, 0.10, 0.15)},
    {"id": "shifty_shooter", "name": "Shifty Shooter", "category": "shooting",
     "effects": _tiers("offDribbleBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "set_shot_specialist", "name": "Set Shot Specialist", "category": "shooting",
     "effects": _tiers("setShotBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "clutch_shooter", "name": "Clutch Shooter", "category": "shooting",
     "effects": _tiers("clutchShotBoost", 0.05, 0.10, 0.15, 0.22)},
    # --- playmaking ---
    {"id": "dimer", "name": "Dimer", "category": "playmaking",
     "effects": _tiers("assistBoost", 0.03, 0.06, 0.10, 0.15)},
    {"id": "floor_general", "name": "Floor General", "category": "playmaking",
     "effects": _tiers("teamOffenseBoost", 1, 2, 3, 4)},
    {"id": "lob_city_passer", "name": "Lob City Passer", "category": "playmaking",
     "effects": _tiers("lobPassBoost", 0.08, 0.15, 0.22, 0.30)},
    {"id": "needle_threader", "name": "Needle Threader", "category": "playmaking",
     "effects": _tiers("tightPassBoost", 0.08, 0.15, 0.22, 0.30)},
    {"id": "tight_handles", "name": "Tight Handles", "category": "playmaking",
     "effects": _tiers("ballSecurityBoost", 0.08, 0.15, 0.22, 0.30)},
    {"id": "unpluckable", "name": "Unpluckable", "category": "playmaking",
     "effects": _tiers("stripResistance", 0.08, 0.15, 0.22, 0.30)},
    # --- defense ---
    {"id": "clamps", "name": "Clamps", "category": "defense",
     "effects": _tiers("perimeterDefBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "intimidator", "name": "Intimidator", "category": "defense",
     "effects": _tiers("contestBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "challenger", "name": "Challenger", "category": "defense",
     "effects": _tiers("contestBoost", 0.04, 0.08, 0.12, 0.18)},
    {"id": "anchor", "name": "Anchor", "category": "defense",
     "effects": _tiers("rimProtectionBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "rim_protector", "name": "Rim Protector", "category": "defense",
     "effects": _tiers("rimProtectionBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "post_lockdown", "name": "Post Lockdown", "category": "defense",
     "effects": _tiers("postDefBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "interceptor", "name": "Interceptor", "category": "defense",
     "effects": _tiers("stealChanceBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "pick_pocket", "name": "Pick Pocket", "category": "defense",
     "effects": _tiers("onBallStealBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "chase_down_artist", "name": "Chase Down Artist", "category": "defense",
     "effects": _tiers("chaseDownBlockBoost", 0.10, 0.20, 0.30, 0.45)},
    {"id": "high_flying_denier", "name": "High-Flying Denier", "category": "defense",
     "effects": _tiers("aerialBlockBoost", 0.08, 0.15, 0.22, 0.30)},
    {"id": "rebound_chaser", "name": "Rebound Chaser", "category": "defense",
     "effects": _tiers("reboundRangeBoost", 0.05, 0.10, 0.15, 0.22)},
    {"id": "boxout_beast", "name": "Boxout Beast", "category": "defense",
     "effects": _tiers("boxOutBoost", 0.08, 0.15, 0.22, 0.30)},
    # --- physical ---
    {"id": "brick_wall", "name": "Brick Wall", "category": "physical",
     "effects": _tiers("screenEffectBoost", 0.08, 0.15, 0.22, 0.30)},
    {"id": "box", "name": "Box", "category": "physical",
     "effects": _tiers("boxOutBoost", 0.05, 0.10, 0.15, 0.22)},
]


# Synergy modifiers are keyed "category.attribute" and are relative (+0.05 = +5%).
DEFAULT_SYNERGIES: List[Dict[str, Any]] = [
    {"id": "dimer_catch_and_shoot", "name": "Kick-Out Rhythm",
     "badge_a": "dimer", "min_level_a": "bronze",
     "badge_b": "catch_and_shoot", "min_level_b": "bronze",
     "effect_type": "shooting_boost", "beneficiary": "b",
     "modifiers": {"offense.three_point": 0.05, "offense.mid_range": 0.05}},
    {"id": "lob_city", "name": "Lob City",
     "badge_a": "lob_city_passer", "min_level_a": "bronze",
     "badge_b": "lob_city_finisher", "min_level_b": "bronze",
     "effect_type": "alley_oop_boost", "beneficiary": "b",
     "modifiers": {"offense.layup": 0.10, "offense.close_shot": 0.10}},
    {"id": "screen_and_roll", "name": "Screen & Roll",
     "badge_a": "brick_wall", "min_level_a": "bronze",
     "badge_b": "pick_and_roller", "min_level_b": "bronze",
     "effect_type": "screen_boost", "beneficiary": "both",
     "modifiers": {"offense.layup": 0.05, "offense.close_shot": 0.05}},
    {"id": "paint_fortress", "name": "Paint Fortress",
     "badge_a": "anchor", "min_level_a": "bronze",
     "badge_b": "intimidator", "min_level_b": "bronze",
     "effect_type": "interior_defense_boost", "beneficiary": "both",
     "modifiers": {"defense.interior_defense": 0.08, "defense.block": 0.08}},
    {"id": "general_deadeye", "name": "Floor General: Deadeye",
     "badge_a": "floor_general", "min_level_a": "silver",
     "badge_b": "deadeye", "min_level_b": "silver",
     "effect_type": "team_shooting_boost", "beneficiary": "team",
     "modifiers": {"offense.three_point": 0.03}},
    {"id": "general_catch_and_shoot", "name": "Floor General: Catch & Shoot",
     "badge_a": "floor_general", "min_level_a": "silver",
     "badge_b": "catch_and_shoot", "min_level_b": "silver",
     "effect_type": "team_shooting_boost", "beneficiary": "team",
     "modifiers": {"offense.three_point": 0.03}},
    {"id": "general_corner", "name": "Floor General: Corner",
     "badge_a": "floor_general", "min_level_a": "silver",
     "badge_b": "corner_specialist", "min_level_b": "silver",
     "effect_type": "team_shooting_boost", "beneficiary": "team",
     "modifiers": {"offense.three_point": 0.03}},
]
