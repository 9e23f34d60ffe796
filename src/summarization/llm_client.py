"""Article summaries from a hosted LLM (Gemini, Anthropic or OpenAI)."""

import structlog
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from ..config.settings import settings

logger = structlog.get_logger()

PROVIDERS = ("gemini", "anthropic", "openai")


class LLMClient:
    """Asks the configured provider for a short summary of one article."""

    SYSTEM_PROMPT = (
        "You write short, neutral news summaries. "
        "Reply with the summary text only: no preamble, no markdown."
    )

    PROMPT = """Summarize this article in at most 3 sentences \
({max_chars} characters or fewer).

ARTICLE:
{text}"""

    # Keep prompts bounded for very long bodies
    MAX_INPUT_CHARS = 8000

    def __init__(self, provider: str = None, api_key: str = None, model: str = None):
        self.provider = provider or settings.llm_provider
        self.model = model or settings.llm_model
        self._api_key = api_key
        self._client = None

    def build_prompt(self, text: str, max_chars: int) -> str:
        return self.PROMPT.format(max_chars=max_chars, text=text[:self.MAX_INPUT_CHARS])

    def token_budget(self, max_chars: int) -> int:
        """Output tokens for a summary of `max_chars`, capped by NEWSFEED_LLM_MAX_TOKENS."""
        # ~4 characters per token, plus room to finish the last sentence
        return min(settings.llm_max_tokens, max_chars // 4 + 50)

    def _get_client(self):
        """Create the provider SDK client on first use."""
        if self._client is not None:
            return self._client

        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {self.provider}")
        api_key = self._api_key or settings.llm_api_key(self.provider)
        if not api_key:
            raise ValueError(
                f"No API key configured for LLM provider {self.provider!r}. "
                f"Set NEWSFEED_{self.provider.upper()}_API_KEY."
            )

        if self.provider == "gemini":
            from google import genai
            self._client = genai.Client(api_key=api_key)
        elif self.provider == "anthropic":
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=api_key)
        else:
            import openai
            self._client = openai.AsyncOpenAI(api_key=api_key)
        return self._client

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_not_exception_type(ValueError),
        reraise=True,
    )
    async def summarize(self, text: str, max_chars: int) -> str:
        """Return the model's summary of `text`. Configuration errors raise ValueError."""
        client = self._get_client()
        prompt = self.build_prompt(text, max_chars)
        max_tokens = self.token_budget(max_chars)
        ask = getattr(self, f"_ask_{self.provider}")

        try:
            reply = await ask(client, prompt, max_tokens)
        except Exception as e:
            logger.warning("llm_call_failed", provider=self.provider, model=self.model, error=str(e))
            raise
        return reply or ""

    async def _ask_gemini(self, client, prompt: str, max_tokens: int) -> str:
        from google.genai import types

        response = await client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=self.SYSTEM_PROMPT,
                temperature=settings.llm_temperature,
                max_output_tokens=max_tokens,
            ),
        )
        return response.text

    async def _ask_anthropic(self, client, prompt: str, max_tokens: int) -> str:
        response = await client.messages.create(
            model=self.model,
            system=self.SYSTEM_PROMPT,
            max_tokens=max_tokens,
            temperature=settings.llm_temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(block.text for block in response.content if block.type == "text")

    async def _ask_openai(self, client, prompt: str, max_tokens: int) -> str:
        response = await client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=settings.llm_temperature,
            messages=[
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
        return response.choices[0].message.content
