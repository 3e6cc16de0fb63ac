from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from shopflow.server.schemas.inspection import InspectionSection
from shopflow.server.settings.config import settings

log = logging.getLogger(__name__)

# Labor estimates above this are treated as nonsense from the model
MAX_LABOR_HOURS = 40.0


class AIClient:
    """
    JSON-in / JSON-out client for an OpenAI-compatible chat endpoint.

    Handles:
      - labor-time estimates for a job
      - inspection checklist generation from a prompt

    Nothing here raises to the caller. call() returns {"error": ...} on any
    failure; the task methods turn that into None / [] so the callers can
    fall back to their deterministic defaults.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Any = None,
    ) -> None:
        self.api_key = (api_key if api_key is not None else settings.openai_api_key).strip()
        self.model = model or settings.ai_model
        self.api_url = api_url or settings.ai_api_url
        self.timeout = timeout if timeout is not None else settings.ai_timeout_seconds
        # anything with a requests-style post(); tests pass a fake
        self.http = http or requests

    # -------------------------------------------------------------
    #  Transport
    # -------------------------------------------------------------
    @staticmethod
    def _safe_json_loads(raw: Any) -> Optional[Any]:
        """
        Parses model output as JSON. If that fails, tries the part between
        the first '{' and the last '}'. Returns None when nothing parses.
        """
        if isinstance(raw, list):
            raw = "".join(
                str(part["text"]) if isinstance(part, dict) and "text" in part else str(part)
                for part in raw
            )
        if not isinstance(raw, str):
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            start = raw.find("{")
            end = raw.rfind("}")
            if start != -1 and end > start:
                try:
                    return json.loads(raw[start:end + 1])
                except json.JSONDecodeError:
                    pass
        return None

    def call(self, system: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sends one JSON prompt and returns the model's JSON object.
        """
        if not self.api_key:
            log.warning("No OPENAI_API_KEY set, skipping AI call")
            return {"error": "missing_api_key"}

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
            ],
            "temperature": 0.0,
            "response_format": {"type": "json_object"},
        }

        try:
            resp = self.http.post(self.api_url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("AI network error: %s", e)
            return {"error": "network_error", "details": str(e)}

        if resp.status_code != 200:
            log.warning("AI API error %s: %s", resp.status_code, getattr(resp, "text", ""))
            return {"error": "api_error", "status": resp.status_code}

        try:
            data = resp.json()
        except ValueError:
            log.warning("AI response was not JSON")
            return {"error": "invalid_json"}

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            log.warning("AI response had no message content")
            return {"error": "decode_error"}

        parsed = self._safe_json_loads(content)
        if not isinstance(parsed, dict):
            log.warning("AI message content was not a JSON object")
            return {"error": "decode_error"}
        return parsed

    # -------------------------------------------------------------
    #  LABOR ESTIMATE
    # -------------------------------------------------------------
    def estimate_labor_hours(self, complaint: str, job_type: str) -> Optional[float]:
        """
        Returns hours, or None when the AI is unavailable or answered
        something unusable (missing, negative, not a number, absurdly large).
        """
        out = self.call(
            "You are a service advisor for a vehicle repair shop. "
            "Estimate flat-rate labor time. Reply with JSON: {\"hours\": number}.",
            {"complaint": complaint, "jobType": job_type},
        )
        if "error" in out:
            return None

        raw = out.get("hours", out.get("laborHours"))
        if isinstance(raw, bool):
            return None
        try:
            hours = float(raw)
        except (TypeError, ValueError):
            log.warning("AI labor estimate not numeric: %r", raw)
            return None

        if hours != hours or hours < 0 or hours > MAX_LABOR_HOURS:
            log.warning("AI labor estimate out of range: %r", hours)
            return None
        return hours

    # -------------------------------------------------------------
    #  INSPECTION LIST
    # -------------------------------------------------------------
    def generate_inspection_list(self, prompt: str) -> List[InspectionSection]:
        """
        Builds inspection categories from a free-text prompt.
        Returns [] on any failure; malformed categories are skipped.
        """
        out = self.call(
            "You build vehicle inspection checklists. Reply with JSON: "
            "{\"categories\": [{\"title\": string, \"items\": [{\"item\": string, \"unit\": string|null}]}]}.",
            {"prompt": prompt},
        )
        if "error" in out:
            return []

        categories = out.get("categories") or out.get("sections") or []
        if not isinstance(categories, list):
            return []

        sections: List[InspectionSection] = []
        for cat in categories:
            if not isinstance(cat, dict) or not cat.get("title"):
                continue
            items = [i for i in cat.get("items") or [] if isinstance(i, dict)]
            try:
                section = InspectionSection.model_validate({"title": cat["title"], "items": items})
            except ValueError as e:
                log.warning("Skipping malformed AI category %r: %s", cat.get("title"), e)
                continue
            # generated checklists start unmarked
            section.items = [i.model_copy(update={"status": "unmarked"}) for i in section.items]
            sections.append(section)
        return sections
