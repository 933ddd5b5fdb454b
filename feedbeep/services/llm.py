import ollama
from feedbeep.services.logger import logger
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type
from feedbeep.config import settings

class LLMService:
    def __init__(self, base_url: str = None, model: str = None, max_attempts: int = None):
        self.base_url = base_url or settings.OLLAMA_BASE_URL
        self.model = model or settings.OLLAMA_MODEL
        self.max_attempts = max_attempts or settings.LLM_MAX_ATTEMPTS
        self.client = ollama.AsyncClient(host=self.base_url)

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=30),
            retry=retry_if_exception_type((Exception,)),
            reraise=True,
            before_sleep=lambda retry_state: logger.warning(
                f"LLM call failed, retrying in {retry_state.next_action.sleep} seconds... (attempt {retry_state.attempt_number})"
            )
        )

    async def generate_text(self, prompt: str, temperature: float = 0.3) -> str:
        """
        Generates text output from the LLM with retry on failure.
        """
        async for attempt in self._retrying():
            with attempt:
                try:
                    response = await self.client.chat(model=self.model, messages=[
                        {'role': 'user', 'content': prompt}
                    ], options={'temperature': temperature})
                    return response['message']['content']
                except Exception as e:
                    logger.error(f"LLM Text Gen failed: {e}")
                    raise  # Re-raise to trigger retry

    async def is_available(self) -> bool:
        """True when the model host answers."""
        try:
            await self.client.list()
            return True
        except Exception as e:
            logger.warning(f"LLM host {self.base_url} unavailable: {e}")
            return False
