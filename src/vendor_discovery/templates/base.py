"""Prompt template for the batched vendor enhancement call.

The prompt carries the query, the event context, every candidate's provider
data and a scoring rubric. The rubric is advisory: nothing enforces it on the
model's output, the hybrid scorer simply trusts the resulting 1-10 score.
"""

from __future__ import annotations

import json

from vendor_discovery.models import EventContext, PlaceCandidate, VendorCategory

SYSTEM_PROMPT = """\
You are a professional event planning assistant evaluating vendors for an event planner. \
You only assess the vendors you are given; never invent vendors or contact details. \
Keep descriptions factual and grounded in the data provided.
"""

CATEGORY_LIST = ", ".join(c.value for c in VendorCategory)


def render_context(context: EventContext | None) -> str:
    """Render the non-empty context fields as a bullet block, or "" if there are none."""
    if context is None:
        return ""

    lines = []
    if context.attendee_count:
        lines.append(f"- {context.attendee_count} attendees")
    if context.event_type:
        lines.append(f"- Event type: {context.event_type}")
    if context.special_requirements:
        lines.append(f"- Special requirements: {context.special_requirements}")
    return "\n".join(lines)


def candidate_payload(candidates: list[PlaceCandidate]) -> list[dict]:
    return [
        {
            "id": c.id,
            "name": c.name,
            "address": c.address,
            "types": c.tags,
            "price_level": c.price_level,
            "rating": c.rating,
            "user_ratings_total": c.rating_count,
            "website": c.website,
            "phone": c.phone,
        }
        for c in candidates
    ]


def build_enhancement_prompt(
    candidates: list[PlaceCandidate],
    query: str,
    context: EventContext | None = None,
) -> str:
    """Build the single user prompt covering every candidate in the batch."""

    event_type = context.event_type if context and context.event_type else "requested"
    attendees = context.attendee_count if context and context.attendee_count else "the expected number of"
    requirements = (
        f"requirements: {context.special_requirements}"
        if context and context.special_requirements
        else "any special requirements"
    )

    parts = [f'I need you to analyze these vendor results from a search for: "{query}"']

    context_block = render_context(context)
    if context_block:
        parts.append(f"\nEVENT CONTEXT:\n{context_block}")

    parts.append("\n## ANALYSIS FRAMEWORK\n")
    parts.append(
        "For each vendor, follow this step-by-step reasoning process:\n\n"
        "1. VENDOR CLASSIFICATION:\n"
        "   * Review the vendor types, features, and characteristics\n"
        f"   * Pick exactly one vendor category: {CATEGORY_LIST}\n\n"
        "2. EVENT SUITABILITY ASSESSMENT:\n"
        "   Calculate a suitability score (1-10) from these criteria:\n"
        "   * Category fit (0-3 points): how directly the vendor matches the search query terms\n"
        f"   * Event type fit (0-3 points): how well it accommodates the {event_type} event\n"
        f"   * Capacity fit (0-1 point): whether it can reasonably host {attendees} attendees\n"
        f"   * Requirements fit (0-1 point): whether it satisfies {requirements}\n"
        "   * Quality signal (0-2 points): rating, review count, price level appropriateness\n\n"
        "3. DESCRIPTION:\n"
        "   * 1-2 sentences of factual, verifiable information\n"
        "   * Connect the vendor's attributes directly to the event needs\n"
        "   * No speculation about specific events unless explicitly mentioned\n"
        "   * Professional, objective tone"
    )

    parts.append("\n--- VENDORS ---\n")
    parts.append(json.dumps(candidate_payload(candidates), indent=2))

    parts.append("\n--- INSTRUCTIONS ---")
    parts.append(
        "Return one entry per vendor as a JSON object with this exact structure:\n"
        "{\n"
        '  "enhancedResults": [\n'
        "    {\n"
        '      "placeId": "the vendor id from the list above",\n'
        f'      "category": "one of: {CATEGORY_LIST}",\n'
        '      "eventSuitabilityScore": 7,\n'
        '      "description": "concise description highlighting event suitability"\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        "Return ONLY the JSON object, no other text."
    )

    return "\n".join(parts)
