"""Bundled food density reference data.

A curated subset of USDA FNDDS values. Densities are grams per milliliter
and macros are per gram of food, in the order calories, carbs, protein, fat.
"""

from local_estimation.domain.nutrition import FoodDensityEntry, MacroData


def _entry(  # noqa: PLR0913
    food_id: str,
    name: str,
    category: str,
    density: float,
    calories: float,
    carbs: float,
    protein: float,
    fat: float,
) -> FoodDensityEntry:
    return FoodDensityEntry(
        id=food_id,
        name=name,
        category=category,
        density_g_per_ml=density,
        macros_per_gram=MacroData(
            calories=calories, carbs_g=carbs, protein_g=protein, fat_g=fat
        ),
    )


FOOD_DENSITY_DATABASE: tuple[FoodDensityEntry, ...] = (
    # Grains & starches
    _entry(
        "rice-white-cooked", "White Rice (cooked)", "grains", 1.1, 1.3, 0.28, 0.027, 0.003
    ),
    _entry(
        "rice-brown-cooked", "Brown Rice (cooked)", "grains", 1.05, 1.11, 0.23, 0.026, 0.009
    ),
    _entry("pasta-cooked", "Pasta (cooked)", "grains", 1.15, 1.31, 0.25, 0.05, 0.011),
    _entry("bread-white", "White Bread", "grains", 0.35, 2.65, 0.49, 0.09, 0.033),
    _entry(
        "bread-whole-wheat", "Whole Wheat Bread", "grains", 0.38, 2.47, 0.41, 0.13, 0.041
    ),
    _entry(
        "oatmeal-cooked", "Oatmeal (cooked)", "grains", 1.0, 0.68, 0.12, 0.025, 0.014
    ),
    _entry("potato-mashed", "Mashed Potato", "grains", 1.1, 0.83, 0.15, 0.019, 0.021),
    _entry("potato-roasted", "Roasted Potato", "grains", 0.9, 1.01, 0.21, 0.023, 0.01),
    _entry("chips-hot", "Hot Chips / Fries", "grains", 0.55, 3.12, 0.41, 0.034, 0.15),
    _entry(
        "noodles-cooked", "Noodles (cooked)", "grains", 1.1, 1.38, 0.25, 0.047, 0.021
    ),
    # Proteins
    _entry(
        "chicken-breast", "Chicken Breast (cooked)", "proteins", 1.1, 1.65, 0, 0.31, 0.036
    ),
    _entry(
        "chicken-thigh", "Chicken Thigh (cooked)", "proteins", 1.05, 2.09, 0, 0.26, 0.109
    ),
    _entry("beef-steak", "Beef Steak (cooked)", "proteins", 1.15, 2.71, 0, 0.26, 0.18),
    _entry("beef-mince", "Beef Mince (cooked)", "proteins", 1.0, 2.5, 0, 0.26, 0.15),
    _entry("pork-chop", "Pork Chop (cooked)", "proteins", 1.1, 2.31, 0, 0.27, 0.133),
    _entry("fish-white", "White Fish (cooked)", "proteins", 1.05, 1.05, 0, 0.22, 0.012),
    _entry("fish-salmon", "Salmon (cooked)", "proteins", 1.08, 2.08, 0, 0.2, 0.133),
    _entry(
        "egg-whole", "Egg (whole, cooked)", "proteins", 1.03, 1.55, 0.011, 0.126, 0.109
    ),
    _entry("tofu", "Tofu", "proteins", 1.05, 0.76, 0.019, 0.08, 0.048),
    _entry(
        "beans-kidney", "Kidney Beans (cooked)", "proteins", 1.08, 1.27, 0.225, 0.087, 0.005
    ),
    _entry(
        "lentils-cooked", "Lentils (cooked)", "proteins", 1.05, 1.16, 0.2, 0.09, 0.004
    ),
    # Vegetables
    _entry("broccoli", "Broccoli", "vegetables", 0.4, 0.34, 0.07, 0.028, 0.004),
    _entry(
        "carrots-cooked", "Carrots (cooked)", "vegetables", 0.9, 0.35, 0.082, 0.008, 0.002
    ),
    _entry("peas", "Green Peas", "vegetables", 0.75, 0.81, 0.143, 0.054, 0.004),
    _entry("corn", "Corn Kernels", "vegetables", 0.72, 0.96, 0.21, 0.032, 0.014),
    _entry(
        "spinach-cooked", "Spinach (cooked)", "vegetables", 0.85, 0.23, 0.036, 0.029, 0.003
    ),
    _entry("lettuce", "Lettuce", "vegetables", 0.1, 0.15, 0.029, 0.013, 0.002),
    _entry("tomato", "Tomato", "vegetables", 0.95, 0.18, 0.039, 0.009, 0.002),
    _entry(
        "capsicum", "Capsicum / Bell Pepper", "vegetables", 0.5, 0.26, 0.06, 0.01, 0.002
    ),
    _entry("mushrooms", "Mushrooms", "vegetables", 0.45, 0.22, 0.033, 0.031, 0.003),
    _entry(
        "onion-cooked", "Onion (cooked)", "vegetables", 0.85, 0.44, 0.104, 0.013, 0.002
    ),
    _entry("zucchini", "Zucchini", "vegetables", 0.6, 0.17, 0.031, 0.012, 0.003),
    # Fruits
    _entry("apple-diced", "Apple (diced)", "fruits", 0.65, 0.52, 0.138, 0.003, 0.002),
    _entry(
        "banana-sliced", "Banana (sliced)", "fruits", 0.95, 0.89, 0.228, 0.011, 0.003
    ),
    _entry("berries-mixed", "Mixed Berries", "fruits", 0.6, 0.43, 0.097, 0.01, 0.003),
    _entry("grapes", "Grapes", "fruits", 0.65, 0.69, 0.181, 0.007, 0.002),
    _entry(
        "orange-segments", "Orange (segments)", "fruits", 0.85, 0.47, 0.118, 0.009, 0.001
    ),
    _entry("mango-diced", "Mango (diced)", "fruits", 0.8, 0.6, 0.15, 0.008, 0.004),
    _entry("watermelon", "Watermelon", "fruits", 0.6, 0.3, 0.076, 0.006, 0.002),
    _entry("pineapple", "Pineapple", "fruits", 0.75, 0.5, 0.131, 0.005, 0.001),
    # Dairy
    _entry("milk", "Milk (whole)", "dairy", 1.03, 0.61, 0.049, 0.032, 0.033),
    _entry("yogurt-plain", "Yogurt (plain)", "dairy", 1.05, 0.61, 0.047, 0.035, 0.033),
    _entry("yogurt-greek", "Greek Yogurt", "dairy", 1.08, 0.97, 0.036, 0.09, 0.05),
    _entry("cheese-cheddar", "Cheddar Cheese", "dairy", 1.1, 4.03, 0.013, 0.249, 0.331),
    _entry("cheese-mozzarella", "Mozzarella", "dairy", 1.0, 3.0, 0.022, 0.22, 0.224),
    _entry("cream", "Cream (heavy)", "dairy", 0.98, 3.4, 0.028, 0.021, 0.365),
    _entry("ice-cream", "Ice Cream", "dairy", 0.55, 2.07, 0.239, 0.035, 0.11),
    # Mixed / prepared foods
    _entry("pizza-slice", "Pizza", "mixed", 0.6, 2.66, 0.33, 0.11, 0.103),
    _entry("burger-patty", "Burger (with bun)", "mixed", 0.75, 2.95, 0.24, 0.17, 0.14),
    _entry("sandwich", "Sandwich (typical)", "mixed", 0.5, 2.32, 0.29, 0.13, 0.08),
    _entry("stir-fry", "Stir Fry (mixed)", "mixed", 0.85, 1.2, 0.08, 0.1, 0.06),
    _entry("curry", "Curry (with sauce)", "mixed", 1.0, 1.5, 0.08, 0.12, 0.09),
    _entry("soup-thick", "Soup (thick/creamy)", "mixed", 1.02, 0.75, 0.08, 0.03, 0.035),
    _entry("soup-broth", "Soup (broth based)", "mixed", 1.0, 0.35, 0.05, 0.02, 0.01),
    _entry("salad-mixed", "Mixed Salad", "mixed", 0.3, 0.2, 0.035, 0.012, 0.003),
    _entry("fried-rice", "Fried Rice", "mixed", 1.0, 1.63, 0.24, 0.043, 0.059),
    _entry("sushi-roll", "Sushi Roll", "mixed", 0.9, 1.5, 0.27, 0.06, 0.025),
    # Snacks
    _entry(
        "chips-packet", "Potato Chips (packet)", "snacks", 0.12, 5.36, 0.53, 0.065, 0.345
    ),
    _entry("popcorn", "Popcorn", "snacks", 0.03, 3.87, 0.78, 0.125, 0.044),
    _entry("nuts-mixed", "Mixed Nuts", "snacks", 0.55, 6.07, 0.21, 0.2, 0.54),
    _entry("chocolate", "Chocolate", "snacks", 1.3, 5.46, 0.598, 0.049, 0.31),
    _entry("cookie", "Cookie", "snacks", 0.5, 4.88, 0.64, 0.052, 0.236),
    _entry("cake", "Cake (typical)", "snacks", 0.4, 3.57, 0.51, 0.043, 0.156),
    _entry("crackers", "Crackers", "snacks", 0.15, 4.84, 0.65, 0.095, 0.21),
    # Sauces & condiments
    _entry("sauce-tomato", "Tomato Sauce", "sauces", 1.05, 0.82, 0.178, 0.016, 0.004),
    _entry("sauce-cream", "Cream Sauce", "sauces", 1.0, 1.5, 0.06, 0.025, 0.13),
    _entry("gravy", "Gravy", "sauces", 1.05, 0.47, 0.068, 0.019, 0.015),
    _entry("hummus", "Hummus", "sauces", 1.1, 1.66, 0.144, 0.078, 0.096),
    _entry("mayonnaise", "Mayonnaise", "sauces", 0.95, 6.8, 0.006, 0.01, 0.75),
)
