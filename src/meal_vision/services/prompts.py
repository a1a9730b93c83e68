"""Prompts and structured-output schema for meal analysis."""

NUTRITION_SYSTEM_PROMPT = """You are a nutrition analysis assistant. Analyze the food and drinks in the provided image and estimate their nutritional content.

CRITICAL RULES:
1. Return ONLY valid JSON matching the schema below - no markdown, no prose
2. All calorie and macro values are ESTIMATES - communicate uncertainty in "notes"
3. If you cannot identify the food clearly, set confidence to "low"
4. If the image does not contain food, return an empty foodItems list, zero totals, confidence "low" and explain in "notes"
5. Round calories to the nearest 5 and macros to the nearest 1g
6. List each distinct food or drink item separately, in the order you detect them
7. totalCalories MUST equal the sum of foodItems[].calories
8. Use null for fiber or sugar when you cannot estimate them, never 0 as a placeholder

JSON SCHEMA:
{
  "totalCalories": number,
  "macros": {
    "protein": number,
    "carbohydrates": number,
    "fat": number,
    "fiber": number | null,
    "sugar": number | null
  },
  "foodItems": [
    {
      "name": string,
      "estimatedPortion": string,
      "calories": number
    }
  ],
  "confidence": "low" | "medium" | "high",
  "notes": string | null
}

PORTION ESTIMATION:
- Use the plate, bowl, cutlery, hands or packaging as scale references
- Standard dinner plate is ~26 cm across; a fist is ~1 cup; a palm of meat is ~85-100 g
- Express portions in common units (cups, pieces, slices, tablespoons, grams)
- Account for visible cooking oils, dressings, sauces and toppings
- Drinks: estimate volume from the glass or cup size (ml or fl oz)

CONFIDENCE GUIDELINES:
- HIGH: Clear, well-lit image of recognizable foods with visible portions
- MEDIUM: Somewhat obscured, mixed dishes, or unusual angles
- LOW: Poor lighting, heavily processed/mixed foods, unclear portions"""

NUTRITION_USER_PROMPT = (
    "Analyze this meal image and provide a detailed nutritional estimate. "
    "Return only the JSON response, no additional text."
)

CONTEXT_TEMPLATE = (
    "\n\nAdditional context from the user (use it to refine identification "
    "and portions): {context}"
)


def build_user_prompt(context: str | None = None) -> str:
    """
    Build the user-turn instruction text.

    Args:
        context: Optional free text from the user, embedded verbatim

    Returns:
        Instruction string for the user turn
    """
    if context and context.strip():
        return NUTRITION_USER_PROMPT + CONTEXT_TEMPLATE.format(context=context)
    return NUTRITION_USER_PROMPT


# Strict structured-output schema mirroring MealAnalysis
MEAL_ANALYSIS_JSON_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "totalCalories": {"type": "number"},
        "macros": {
            "type": "object",
            "properties": {
                "protein": {"type": "number"},
                "carbohydrates": {"type": "number"},
                "fat": {"type": "number"},
                "fiber": {"type": ["number", "null"]},
                "sugar": {"type": ["number", "null"]},
            },
            "required": ["protein", "carbohydrates", "fat", "fiber", "sugar"],
            "additionalProperties": False,
        },
        "foodItems": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "estimatedPortion": {"type": "string"},
                    "calories": {"type": "number"},
                },
                "required": ["name", "estimatedPortion", "calories"],
                "additionalProperties": False,
            },
        },
        "confidence": {"type": "string", "enum": ["low", "medium", "high"]},
        "notes": {"type": ["string", "null"]},
    },
    "required": ["totalCalories", "macros", "foodItems", "confidence", "notes"],
    "additionalProperties": False,
}

MEAL_ANALYSIS_SCHEMA_NAME = "meal_analysis"
