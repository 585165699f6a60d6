"""Client for the remote meal and workout plan generator.

The generator is a hosted function that reads the user's profile, asks a
language model for a plan and returns it as JSON.  This module only deals
with the HTTP exchange: every failure is turned into a :class:`PlanError`
whose ``code`` tells the caller what to show.  Retrying is left to the
caller.
"""

from __future__ import annotations

import logging

import requests

# Error codes carried by :class:`PlanError`.
UNAUTHORIZED = "unauthorized"
MISSING_PROFILE = "missing-profile"
RATE_LIMITED = "upstream-rate-limited"
UPSTREAM_ERROR = "upstream-error"
MALFORMED_RESPONSE = "malformed-response"

# Profile fields the generator cannot work without.
REQUIRED_PROFILE_FIELDS = ("age", "gender", "weight", "height")

DEFAULT_TIMEOUT = 60


class PlanError(Exception):
    """Plan generation failed; ``code`` is one of the module constants."""

    def __init__(self, code: str, message: str, status: int | None = None):
        super().__init__(message)
        self.code = code
        self.status = status


def missing_profile_fields(profile: dict | None) -> list[str]:
    """Return the required profile fields that are absent or empty."""

    profile = profile or {}
    return [f for f in REQUIRED_PROFILE_FIELDS if profile.get(f) in (None, "")]


class PlanClient:
    """Call the ``generate-plan`` and ``generate-meal-plan`` functions."""

    def __init__(self, base_url: str, token: str | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _post(self, function: str, payload: dict) -> dict:
        if not self.token:
            raise PlanError(UNAUTHORIZED, "Authentication required")
        url = f"{self.base_url}/functions/v1/{function}"
        try:
            resp = requests.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logging.exception("Plan service request to %s failed", url)
            raise PlanError(UPSTREAM_ERROR, "Plan service is unreachable") from exc

        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        if resp.status_code >= 400:
            message = body.get("error") or f"Plan service returned {resp.status_code}"
            logging.warning("Plan service %s failed (%s): %s", function, resp.status_code, message)
            raise PlanError(_code_for_error(resp.status_code, body), message, resp.status_code)
        if not body:
            raise PlanError(MALFORMED_RESPONSE, "Plan service returned an unreadable response", resp.status_code)
        return body

    def generate_plan(self, profile: dict) -> dict:
        """Return ``{"nutrition_plan": ..., "workout_plan": ...}`` for ``profile``."""

        missing = missing_profile_fields(profile)
        if missing:
            raise PlanError(MISSING_PROFILE, "Profile is incomplete: " + ", ".join(missing))
        body = self._post("generate-plan", {"profile": profile})
        if "nutrition_plan" not in body or "workout_plan" not in body:
            raise PlanError(MALFORMED_RESPONSE, "Plan is missing nutrition or workout data")
        return {
            "nutrition_plan": body["nutrition_plan"],
            "workout_plan": body["workout_plan"],
        }

    def generate_meal_plan(self, days: int = 7) -> dict:
        """Generate and store a meal plan covering ``days`` days.

        The service reads the stored profile itself and answers with a
        confirmation payload.
        """

        if days < 1:
            raise ValueError("days must be positive")
        body = self._post("generate-meal-plan", {"daysToGenerate": days})
        if not body.get("success"):
            raise PlanError(MALFORMED_RESPONSE, body.get("error") or "Meal plan was not generated")
        return body


# Messages the service sends when the model output could not be used.
_UNUSABLE_OUTPUT_MESSAGES = (
    "AI returned empty response",
    "Failed to parse AI response as JSON",
)


def _code_for_error(status: int, body: dict) -> str:
    """Classify an error response from the plan service.

    Errors relayed from the language model carry the provider's ``code``;
    a relayed 401 is a server-side key problem, not a user login problem.
    """

    if status == 401:
        return UPSTREAM_ERROR if body.get("code") else UNAUTHORIZED
    if status == 404:
        return MISSING_PROFILE
    if status == 429:
        return RATE_LIMITED
    if status >= 500 and (
        "preview" in body
        or "details" in body
        or body.get("error") in _UNUSABLE_OUTPUT_MESSAGES
    ):
        return MALFORMED_RESPONSE
    return UPSTREAM_ERROR
