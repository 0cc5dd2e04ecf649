# backend/kisan_saathi/tools/infer.py
import json
import logging
import time
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from kisan_saathi.config import settings
from kisan_saathi.core.models import ResolvedLocation
from kisan_saathi.errors import CredentialMissing
from kisan_saathi.tools.fallback import FallbackGenerator
from kisan_saathi.tools.validation import valid_coordinates

log = logging.getLogger("kisan_saathi.infer")

def t() -> float:
    return time.perf_counter()

SYSTEM = (
    "You are a geolocation assistant for Kisan Saathi, an agricultural app for Indian farmers. "
    "Infer the most likely city and state in India from the contextual signals given. "
    "Asia/Kolkata is used across all of India and English is the default browser language almost "
    "everywhere, so treat those as weak evidence. Prefer major agricultural regions when uncertain. "
    "Reply with ONLY a JSON object: "
    '{"latitude": number, "longitude": number, "city": string, "state": string, '
    '"country": "India", "confidence": number between 0 and 1, "reasoning": string}'
)

AGRI_REGIONS = (
    "Punjab - Chandigarh 30.7333,76.7794; Haryana - Delhi NCR 28.6139,77.2090; "
    "Uttar Pradesh - Lucknow 26.8467,80.9462; Maharashtra - Pune 18.5204,73.8567; "
    "Karnataka - Bangalore 12.9716,77.5946; Tamil Nadu - Chennai 13.0827,80.2707; "
    "Andhra Pradesh - Hyderabad 17.3850,78.4867; West Bengal - Kolkata 22.5726,88.3639; "
    "Gujarat - Ahmedabad 23.0225,72.5714; Rajasthan - Jaipur 26.9124,75.7873"
)


def extract_json_object(content: str) -> Optional[Dict[str, Any]]:
    """First {...} block in a model reply (tolerates ```json fences and chatter)."""
    if not content:
        return None
    start = content.find("{")
    while start != -1:
        depth = 0
        for i in range(start, len(content)):
            ch = content[i]
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    try:
                        obj = json.loads(content[start:i + 1])
                    except json.JSONDecodeError:
                        break
                    return obj if isinstance(obj, dict) else None
        start = content.find("{", start + 1)
    return None


def to_resolved(obj: Dict[str, Any]) -> Optional[ResolvedLocation]:
    try:
        lat = float(obj["latitude"])
        lon = float(obj["longitude"])
        conf = float(obj.get("confidence", 0.5))
    except (KeyError, TypeError, ValueError):
        return None
    city = str(obj.get("city") or "").strip()
    state = str(obj.get("state") or "").strip()
    if not city or not state or not valid_coordinates(lat, lon):
        return None
    return ResolvedLocation(
        city=city,
        state=state,
        country=str(obj.get("country") or "India"),
        lat=lat,
        lon=lon,
        accuracy=round(max(0.0, min(conf, 1.0)) * 100),
        source="heuristic",
        timestamp=int(time.time() * 1000),
        confidence=round(max(0.0, min(conf, 1.0)) * 100),
        reasoning=str(obj.get("reasoning") or ""),
        provider="llm",
        attempted=["ai_inference"],
    )


class LocationInferencer:
    def __init__(
        self,
        api_key: str = settings.OPENAI_API_KEY,
        model: str = settings.OPENAI_MODEL,
        fallback: Optional[FallbackGenerator] = None,
        llm: Optional[Any] = None,
        timeout: float = settings.LLM_TIMEOUT_SEC,
    ):
        self._api_key = api_key
        self._model = model
        self._fallback = fallback or FallbackGenerator()
        self._llm = llm
        self._timeout = timeout

    def _chat(self):
        if self._llm is None:
            if not self._api_key:
                raise CredentialMissing("OPENAI_API_KEY is not configured")
            self._llm = ChatOpenAI(model=self._model, api_key=self._api_key, temperature=0.2, timeout=self._timeout)
        return self._llm

    async def infer(self, signals: Dict[str, Any]) -> ResolvedLocation:
        llm = self._chat()  # CredentialMissing propagates
        start = t()
        lines = [f"- {k}: {v if v not in (None, '', {}) else 'Not available'}" for k, v in signals.items()]
        user = (
            "Available information:\n" + "\n".join(lines) + "\n\n"
            f"Major agricultural regions and reference coordinates: {AGRI_REGIONS}"
        )
        try:
            resp = await llm.ainvoke([SystemMessage(content=SYSTEM), HumanMessage(content=user)])
        except Exception as e:
            log.warning("❌ Location inference call failed: %s", e)
            return self._fallback.location(["ai_inference"], "Fallback to agricultural center due to AI service error")

        content = getattr(resp, "content", "") or ""
        obj = extract_json_object(content if isinstance(content, str) else str(content))
        result = to_resolved(obj) if obj else None
        log.info("⏱️  Location inference: %dms", round((t() - start) * 1000))
        if result is None:
            log.warning("⚠️ Unusable inference reply: %.200s", content)
            return self._fallback.location(["ai_inference"], "Fallback to agricultural center; AI reply was not a usable location")
        return result
