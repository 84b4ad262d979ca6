import logging
from typing import Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from kpi_dashboard.core.config import AISettings, settings
from kpi_dashboard.core.exceptions import AIError, AIKillSwitchError

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


class AIClient:
    """
    Chat-completion client for the assistant and report generator.
    Retries transient failures, then falls back to a second model.
    """

    def __init__(self, ai_settings: Optional[AISettings] = None):
        self.settings = ai_settings or settings.ai

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.openrouter_api_key) and not self.settings.kill_switch

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(requests.exceptions.RequestException),
        reraise=True,
    )
    def _do_call(self, messages: List[Dict[str, str]], model_name: str, temperature: float, max_tokens: int) -> str:
        logger.info(f"Calling AI Model: {model_name}")
        response = requests.post(
            OPENROUTER_URL,
            headers={
                "Authorization": f"Bearer {self.settings.openrouter_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model_name,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            timeout=self.settings.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"]

    def _call_with_errors(self, messages, model_name, temperature, max_tokens) -> str:
        try:
            return self._do_call(messages, model_name, temperature, max_tokens)
        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise AIError("AI service reached timeout limit.")
        except requests.exceptions.HTTPError as e:
            logger.error(f"AI service HTTP error: {e}")
            raise AIError(f"AI service returned error: {e.response.status_code}")
        except (requests.exceptions.RequestException, KeyError, IndexError, ValueError) as e:
            logger.exception("Unexpected error during AI call.")
            raise AIError(f"AI service error: {e}")

    def complete(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        max_tokens: int = 1000,
        temperature: Optional[float] = None,
    ) -> str:
        if self.settings.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()
        if not self.settings.openrouter_api_key:
            raise AIError("AI service configuration error.")

        temperature = self.settings.temperature if temperature is None else temperature
        full_messages = [{"role": "system", "content": system_prompt}, *messages]
        try:
            return self._call_with_errors(full_messages, self.settings.model_name, temperature, max_tokens)
        except AIError as e:
            logger.warning(f"Primary model {self.settings.model_name} failed: {e.message}. Attempting fallback.")
            try:
                return self._call_with_errors(full_messages, self.settings.fallback_model, temperature, max_tokens)
            except AIError as fe:
                logger.error(f"Fallback model {self.settings.fallback_model} also failed: {fe.message}")
                raise AIError(f"AI service completely unavailable (Primary: {e.message}, Fallback: {fe.message})")


def get_ai_client() -> AIClient:
    return AIClient()
