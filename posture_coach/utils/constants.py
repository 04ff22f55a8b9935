"""
Fixed values shared across the Posture Coach backend.

Tunable values (model, retries, tolerances, file paths) live in config.py;
this module only holds values that are part of the data contract.
"""

# Number of items the LLM must pick at each step
MAX_EXERCISES = 3
MAX_PRODUCTS = 3

# LLM response fields
SELECTED_EXERCISES_FIELD = "selected_exercises"
SELECTED_PRODUCTS_FIELD = "selected_products"
REASONING_FIELD = "reasoning"

# Exercise images come from the free-exercise-db repository
EXERCISE_IMAGE_BASE_URL = "https://raw.githubusercontent.com/yuhonas/free-exercise-db/main/exercises/"

# Relative product URLs are resolved against the shop
DECATHLON_BASE_URL = "https://www.decathlon.fr/"

DECATHLON_IMAGE_URL_TEMPLATE = "https://contents.mediadecathlon.com/p{product_id}/sq/200x200/"
DECATHLON_PLACEHOLDER_IMAGE_URL = (
    "https://contents.mediadecathlon.com/s894037/"
    "k$d26c4de3bb9d2c8aa58e8a3e3b1d3f47/sq/200x200/decathlon-logo.jpg"
)

# House brands recognised in product labels, checked in this order
KNOWN_BRANDS = (
    "Garmin",
    "Domyos",
    "Kalenji",
    "Kiprun",
    "Quechua",
    "Forclaz",
    "Btwin",
    "Van Rysel",
    "Rockrider",
    "Nabaiji",
    "Aptonia",
    "Nyamba",
)
DEFAULT_BRAND = "Decathlon"

# Questionnaire pain area -> muscles to target
PAIN_AREA_MUSCLES = {
    "neck": ["neck", "traps"],
    "shoulders": ["shoulders", "traps"],
    "upper_back": ["middle back", "lats", "traps"],
    "lower_back": ["lower back", "glutes"],
    "hips": ["glutes", "abductors", "adductors"],
    "knees": ["quadriceps", "hamstrings", "calves"],
}

# Answers to the yes/no pain question that are not pain areas
PAIN_CHECK_ANSWERS = {"no-pain", "has-pain"}

# Questionnaire goal -> preferred exercise categories
GOAL_CATEGORIES = {
    "posture": ["stretching", "strength"],
    "strength": ["strength", "powerlifting"],
    "flexibility": ["stretching"],
    "rehabilitation": ["stretching", "strength"],
}

DEFAULT_CATEGORIES = ["strength"]
DEFAULT_EQUIPMENT = ["body only"]
PAIN_AVOID_LIST = ["high impact"]

# The questionnaire says "advanced"; the exercise catalog says "expert"
FITNESS_LEVEL_ALIASES = {"advanced": "expert"}
