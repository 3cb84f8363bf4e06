

MOTIVATION_SYSTEM_PROMPT = "You are a calm, stoic coach who helps people keep their discipline streaks going."


def get_motivational_quote_prompt(streak_days: int) -> str:
    """
    Generate prompt for a short motivational line.

    Args:
        streak_days: Length of the user's current streak in days

    Returns:
        Formatted prompt string
    """
    return f"""I am currently on a streak of {streak_days} days of delayed gratification.
    Give me a short, powerful, philosophical, or stoic motivational quote or advice (max 2 sentences) to keep me going.
    Do not use quotes. Just the text."""
