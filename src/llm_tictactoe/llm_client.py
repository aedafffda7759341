from __future__ import annotations
"""
Generation oracle over an OpenAI-compatible chat completions endpoint.

The rest of the code only sees the oracle call signature
(prompt, api_override, instruct_override, quiet_to_loud, system_prompt_override, max_output_length)
and gets raw text back. Failures propagate; the move resolver owns retry accounting.
"""
from typing import Any, Dict, List, Optional
import logging

from openai import AsyncOpenAI

from .config import SETTINGS

log = logging.getLogger("llm_client")

SYSTEM = "You are a witty companion playing Tic-Tac-Toe with the user."


class OpenAIGenerationOracle:
    def __init__(self, model: Optional[str] = None, client: Optional[AsyncOpenAI] = None, system: str = SYSTEM):
        self.model = model or SETTINGS.model
        if not self.model:
            raise ValueError("Model is required; set LLMTTT_MODEL in settings.yml or the environment.")
        self.client = client or AsyncOpenAI(api_key=SETTINGS.llm_api_key or None, base_url=SETTINGS.api_base or None)
        self.system = system

    def build_messages(self, prompt: str, system_prompt_override: Optional[str] = None, instruct_override: bool = False) -> List[Dict[str, str]]:
        if instruct_override and not system_prompt_override:
            # Plain instruction: no persona, just the request.
            return [{"role": "user", "content": prompt}]
        system = system_prompt_override or self.system
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]

    async def __call__(
        self,
        prompt: str,
        api_override: Optional[str] = None,
        instruct_override: bool = False,
        quiet_to_loud: bool = False,
        system_prompt_override: Optional[str] = None,
        max_output_length: Optional[int] = None,
    ) -> str:
        model = api_override or self.model
        kwargs: Dict[str, Any] = {}
        if max_output_length:
            kwargs["max_tokens"] = int(max_output_length)
        rsp = await self.client.chat.completions.create(
            model=model,
            messages=self.build_messages(prompt, system_prompt_override, instruct_override),
            **kwargs,
        )
        text = _extract_text(rsp)
        if quiet_to_loud:
            log.info("Oracle reply (%s): %s", model, text)
        else:
            log.debug("Oracle reply (%s): %s", model, text)
        return text.strip()


def _extract_text(rsp) -> str:
    if hasattr(rsp, "choices") and rsp.choices:
        msg = rsp.choices[0].message
        content = getattr(msg, "content", None)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = []
            for c in content:
                if isinstance(c, dict):
                    if c.get("type") == "text" and isinstance(c.get("text"), str):
                        parts.append(c["text"])
                    continue
                t = getattr(c, "text", None)
                if isinstance(t, str):
                    parts.append(t)
            return "\n".join(parts)
    return ""
