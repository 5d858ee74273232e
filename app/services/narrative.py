# services/narrative.py
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import NarrativeBackendUnavailable
from app.schemas.wellbeing_report import GeneratedBy, Recommendation, Trend, WellbeingLevel
from app.services.aggregator import AggregateSnapshot
from app.services.scorer import ScoreResult
from app.services.usage_gate import plan_name

logger = logging.getLogger(__name__)


# =====================================================================
# CONTRACT
# =====================================================================

@dataclass(frozen=True)
class NarrativeContext:
    """Everything a narrative backend may draw on for one report."""
    snapshot: AggregateSnapshot
    trend: Trend
    score: ScoreResult
    recommendations: Sequence[Recommendation]


@dataclass(frozen=True)
class NarrativeResult:
    text: str
    generated_by: GeneratedBy
    model: Optional[str] = None


class NarrativeGenerator(ABC):
    """A backend that turns a report context into a non-empty summary."""

    @abstractmethod
    def generate(self, context: NarrativeContext) -> NarrativeResult:
        ...


# =====================================================================
# DETERMINISTIC BACKEND
# =====================================================================

TREND_PHRASES = {
    Trend.improving: "your mood has been improving",
    Trend.stable: "your mood has stayed steady",
    Trend.declining: "your mood has been dipping",
}


class TemplateNarrativeGenerator(NarrativeGenerator):
    """
    Offline summary built from fixed sentences.

    Output depends only on the context, so the same logs always produce
    byte-identical text.
    """

    def generate(self, context: NarrativeContext) -> NarrativeResult:
        snap = context.snapshot

        if snap.is_empty:
            text = (
                "No mood or activity logs were recorded for this period. "
                "Start logging your mood and activities to receive a personalised wellbeing summary."
            )
        elif not snap.has_mood_data:
            text = " ".join([
                "No mood check-ins were recorded for this period, so an overall score could not be calculated.",
                self._activity_sentence(snap),
                "Start logging your mood daily to see how your activities affect how you feel.",
            ])
        else:
            sentences = [
                self._opening(snap.average_mood),
                f"Your average mood score is {snap.average_mood:.1f}/10 across "
                f"{snap.mood_count} check-in{'s' if snap.mood_count != 1 else ''}, "
                f"and {TREND_PHRASES[Trend(context.trend)]}.",
                f"Your overall wellbeing score is {context.score.score}/100 "
                f"({WellbeingLevel(context.score.level).value.replace('_', ' ')}).",
            ]
            if snap.average_stress is not None:
                stress = f"Your average stress level was {snap.average_stress:.1f}/10"
                if snap.high_stress_count:
                    stress += f", with {snap.high_stress_count} high-stress check-in" \
                              f"{'s' if snap.high_stress_count != 1 else ''}"
                sentences.append(stress + ".")
            if snap.average_sleep is not None:
                sentences.append(f"You slept an average of {snap.average_sleep:.1f} hours a night.")
            sentences.append(self._activity_sentence(snap))
            sentences.append(f"Top suggestion: {context.recommendations[0].title}.")
            text = " ".join(sentences)

        return NarrativeResult(text=text, generated_by=GeneratedBy.fallback)

    @staticmethod
    def _opening(average_mood: float) -> str:
        if average_mood >= 7:
            return "You're doing well! Your mood and activity levels show positive patterns."
        if average_mood >= 5:
            return "You're maintaining steady wellbeing. There's room for growth in some areas."
        return "Your wellbeing could use some attention. Consider focusing on self-care activities."

    @staticmethod
    def _activity_sentence(snap: AggregateSnapshot) -> str:
        if not snap.activity_count:
            return "No activities were logged in this period."
        plural = "activity" if snap.activity_count == 1 else "activities"
        return (
            f"You logged {snap.activity_count} {plural} totalling "
            f"{snap.total_activity_minutes} minutes, mostly {snap.dominant_activity}."
        )


# =====================================================================
# GENERATIVE BACKEND
# =====================================================================

class GenerativeNarrativeGenerator(NarrativeGenerator):
    """
    Asks a remote text-generation endpoint for the summary.

    Exactly one HTTP attempt is made per report, bounded by the timeout.
    Any failure surfaces as NarrativeBackendUnavailable.
    """

    def __init__(
        self,
        url: str,
        model: str,
        timeout: float,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.url = url
        self.model = model
        self.timeout = timeout
        self.api_key = api_key
        self.client = client

    def build_prompt(self, context: NarrativeContext) -> str:
        snap = context.snapshot
        points = snap.data_points()
        recs = "\n".join(f"- {r.title} ({r.priority})" for r in context.recommendations)
        return (
            "You are a supportive wellbeing assistant. You do not diagnose or give medical advice.\n"
            "Write 2-3 sentences summarizing this user's wellbeing for the period.\n\n"
            f"- Average Mood Score: {points['average_mood_score']}/10\n"
            f"- Mood Check-ins: {points['total_mood_logs']}\n"
            f"- Mood Trend: {Trend(context.trend).value}\n"
            f"- Average Stress Level: {points['average_stress_level']}/10\n"
            f"- Average Sleep Hours: {points['average_sleep_hours']}\n"
            f"- Total Activity Minutes: {points['total_activity_minutes']}\n"
            f"- Most Common Mood: {points['most_common_mood']}\n"
            f"- Most Common Activity: {points['most_common_activity']}\n"
            f"- Overall Score: {context.score.score}/100\n\n"
            f"Recommendations:\n{recs}\n"
        )

    def _post(self, client: httpx.Client, payload: dict) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        return client.post(self.url, json=payload, headers=headers, timeout=self.timeout)

    def generate(self, context: NarrativeContext) -> NarrativeResult:
        payload = {"model": self.model, "prompt": self.build_prompt(context)}
        try:
            if self.client is not None:
                response = self._post(self.client, payload)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = self._post(client, payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise NarrativeBackendUnavailable(f"Generative backend request failed: {exc}") from exc
        except ValueError as exc:
            raise NarrativeBackendUnavailable("Generative backend returned malformed JSON") from exc

        raw = (data.get("text") or data.get("summary")) if isinstance(data, dict) else None
        if not isinstance(raw, str):
            raise NarrativeBackendUnavailable("Generative backend returned no text")

        # Collapse whitespace so the summary is a single paragraph
        text = " ".join(raw.split())
        if not text:
            raise NarrativeBackendUnavailable("Generative backend returned empty text")

        return NarrativeResult(text=text, generated_by=GeneratedBy.ai, model=self.model)


# =====================================================================
# FALLBACK COMPOSITION
# =====================================================================

class GuardedNarrativeGenerator(NarrativeGenerator):
    """
    Tries the primary backend once and substitutes the fallback on any
    failure, so a spent quota unit always yields a report.
    """

    def __init__(self, primary: NarrativeGenerator, fallback: NarrativeGenerator):
        self.primary = primary
        self.fallback = fallback

    def generate(self, context: NarrativeContext) -> NarrativeResult:
        try:
            return self.primary.generate(context)
        except Exception as exc:
            logger.warning(f"Narrative backend failed, using fallback summary: {exc!r}")
            return self.fallback.generate(context)


class NarrativeGeneratorFactory:
    """Picks the narrative backend a user's plan can afford."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or default_settings
        self.client = client
        self.fallback = TemplateNarrativeGenerator()

    def generative_enabled(self, plan) -> bool:
        return bool(self.settings.GENERATIVE_BACKEND_URL) and plan_name(plan) in self.settings.GENERATIVE_NARRATIVE_PLANS

    def for_plan(self, plan) -> NarrativeGenerator:
        if not self.generative_enabled(plan):
            return self.fallback

        primary = GenerativeNarrativeGenerator(
            url=self.settings.GENERATIVE_BACKEND_URL,
            model=self.settings.GENERATIVE_BACKEND_MODEL,
            timeout=self.settings.GENERATIVE_BACKEND_TIMEOUT,
            api_key=self.settings.GENERATIVE_BACKEND_API_KEY,
            client=self.client,
        )
        return GuardedNarrativeGenerator(primary, self.fallback)
