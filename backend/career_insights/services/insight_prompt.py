"""Prompt template for weekly industry insight generation."""

from __future__ import annotations


INSIGHT_FIELDS: tuple[str, ...] = (
	"salaryRanges",
	"growthRate",
	"demandLevel",
	"topSkills",
	"marketOutlook",
	"keyTrends",
	"recommendedSkills",
)

SALARY_RANGE_FIELDS: tuple[str, ...] = ("role", "min", "max", "median", "location")

_INSIGHT_PROMPT_TEMPLATE = """\
Analyze the current state of the {industry} industry and provide insights in ONLY the following JSON format without any additional notes or explanations:
{{
    "salaryRanges": [
        {{ "role": "string", "min": number, "max": number, "median": number, "location": "string" }}
    ],
    "growthRate": number,
    "demandLevel": "HIGH" | "MEDIUM" | "LOW",
    "topSkills": ["skill1", "skill2"],
    "marketOutlook": "POSITIVE" | "NEUTRAL" | "NEGATIVE",
    "keyTrends": ["trend1", "trend2"],
    "recommendedSkills": ["skill1", "skill2"]
}}

IMPORTANT: Return ONLY the JSON. No additional text, notes, or markdown formatting.
Include at least 5 common roles for salary ranges.
Growth rate should be a percentage.
Include at least 5 skills and trends.
"""


def build_insight_prompt(industry: str) -> str:
	"""Render the insight prompt for one industry."""
	name = industry.strip()
	if not name:
		raise ValueError("industry is required to build an insight prompt.")
	return _INSIGHT_PROMPT_TEMPLATE.format(industry=name)
