import logging

from rest_framework.exceptions import ValidationError

from clinic.services import llm

logger = logging.getLogger(__name__)

SYSTEM = 'You are a clinical pharmacist expert. Always respond with valid JSON only.'


def interactions_prompt(drugs: list[str]) -> str:
    return f"""You are a pharmacist AI assistant. Analyze the following list of medications for potential drug-drug interactions.

Medications to check: {', '.join(drugs)}

For each potential interaction found, provide:
1. The two drugs involved
2. Severity level (low, moderate, high, or critical)
3. A brief description of the interaction
4. A recommendation for the healthcare provider

Respond in valid JSON format only, with no additional text:
{{
  "interactions": [
    {{
      "drug1": "drug name 1",
      "drug2": "drug name 2",
      "severity": "low|moderate|high|critical",
      "description": "Brief description of the interaction",
      "recommendation": "What the healthcare provider should do"
    }}
  ]
}}

If no significant interactions are found, return: {{ "interactions": [] }}"""


def check_interactions(drugs) -> dict:
    drugs = [d.strip() for d in (drugs or []) if isinstance(d, str) and d.strip()]
    if len(drugs) < 2:
        raise ValidationError('Please provide at least 2 drugs to check for interactions')
    logger.info('checking interactions for %d drugs', len(drugs))
    content = llm.chat(SYSTEM, interactions_prompt(drugs), temperature=0.3, max_tokens=2000)
    result = llm.parse_json(content, None)
    if not isinstance(result, dict):
        result = {'interactions': []}
    return result
