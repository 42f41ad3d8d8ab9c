"""
RGB thresholds for the rule-based band classifier.

Each entry names one rule; bounds are exclusive. "min_*" keys are lower
bounds, "max_*" keys upper bounds, "*_ratio" keys bound green/red.
"""

COLOR_THRESHOLDS = {
    "black": {"max_channel": 40},
    "white": {"min_channel": 200},
    "yellow": {
        "min_red": 180,
        "min_green": 160,
        "max_blue": 100,
        "max_red_green_diff": 50,
        "max_red_minus_green": 30,
        "min_brightness": 140,
    },
    "gold": {
        "min_red": 100, "max_red": 220,
        "min_green": 50, "max_green": 180,
        "max_blue": 90,
        "min_brightness": 80, "max_brightness": 180,
        "min_ratio": 0.35, "max_ratio": 0.7,
    },
    "silver": {"max_pair_diff": 30, "min_channel": 120, "max_channel": 180},
    "brown_reject": {"min_green": 20, "max_ratio": 0.4},
    "brown_dark": {"min_red": 60, "max_red": 130, "max_green": 20, "max_blue": 20},
    "brown_medium": {
        "min_red": 80, "max_red": 140,
        "min_green": 20, "max_green": 50,
        "max_blue": 30,
        "min_red_minus_green": 50,
        "min_green_minus_blue": 10,
    },
    "brown_light": {
        "min_red": 120, "max_red": 180,
        "min_green": 60, "max_green": 100,
        "min_blue": 20, "max_blue": 60,
        "min_red_minus_green": 40,
        "min_green_minus_blue": 20,
    },
    "orange": {"min_red": 160, "min_green": 80, "max_green": 140, "max_blue": 70, "min_red_minus_green": 40},
    "red_strong": {"min_red": 140, "max_green": 60, "max_blue": 60, "min_red_minus_green": 80},
    "red_medium": {
        "min_red": 120, "max_green": 50, "max_blue": 50,
        "min_red_minus_green": 70, "min_red_minus_blue": 70,
    },
    "green": {"min_green": 100, "max_red": 80, "max_blue": 80, "min_green_minus_red": 30, "min_green_minus_blue": 30},
    "blue": {"min_blue": 120, "max_red": 80, "max_green": 80, "min_blue_minus_red": 50, "min_blue_minus_green": 50},
    "violet": {"min_blue": 80, "min_red": 70, "max_green": 60, "max_red_blue_diff": 50},
    "gray": {"max_pair_diff": 30, "min_channel": 60, "max_channel": 140},

    # Role-specific leniency
    "tolerance_gold": {
        "min_red": 80, "max_red": 180,
        "min_green": 40, "max_green": 120,
        "max_blue": 40,
        "min_ratio": 0.35, "max_ratio": 0.7,
    },
    "tolerance_warm_gold": {"min_red": 80, "min_green": 40, "max_blue": 30, "min_ratio": 0.4},
    "multiplier_shadowed_yellow": {
        "min_red": 70, "min_green": 30, "max_blue": 20,
        "min_ratio": 0.3, "max_ratio": 0.8,
    },
    "multiplier_dark_yellow": {"min_red": 70, "min_green": 30, "max_blue": 20, "min_red_minus_blue": 50},
    "digit_remap_yellow": {"min_red": 180, "min_green": 150, "max_blue": 100},
}
