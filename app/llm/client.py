from typing import Optional
import openai
from app.llm.prompts import MOTIVATION_SYSTEM_PROMPT, get_motivational_quote_prompt
from app.utils.logger import get_logger

logger = get_logger(__name__)

UNCONFIGURED_FALLBACK = "Stay strong! You are doing great."
ERROR_FALLBACK = "Discipline is freedom. Keep going."


class LLMClient:
    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini"):
        """Initialize OpenAI client. Without an API key every call returns the fallback text."""
        self.model = model
        self.client = openai.OpenAI(api_key=api_key) if api_key else None
        if self.client is None:
            logger.info("OPENAI_API_KEY not set; motivational text will use the fallback")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def get_motivational_quote(self, streak_days: int) -> str:
        """
        One short motivational line for a streak ``streak_days`` long.

        Single attempt, no retries. Never raises: a missing key or any failure
        returns a fixed fallback string.
        """
        if self.client is None:
            return UNCONFIGURED_FALLBACK

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": MOTIVATION_SYSTEM_PROMPT},
                    {"role": "user", "content": get_motivational_quote_prompt(streak_days)},
                ],
                temperature=1,
            )
            text = (completion.choices[0].message.content or "").strip()
            if not text:
                logger.warning("Empty motivational text from LLM; using fallback")
                return ERROR_FALLBACK
            return text
        except Exception as e:
            logger.error(f"Error fetching motivational text: {e}")
            return ERROR_FALLBACK
