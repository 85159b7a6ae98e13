"""Prompt templates for generated alert explanations."""

EXPLANATION_PROMPT = """You are a financial advisor AI helping users understand subscription risks.

Analyze this subscription issue and provide a brief, clear explanation:

Type: {anomaly_type}
Merchant: {merchant}
Monthly Impact: {currency}{monthly_loss}
Yearly Impact: {currency}{yearly_loss}
Details: {details}

Provide a JSON response with:
{{
  "title": "Short alert title (max 50 chars)",
  "description": "One sentence describing the issue",
  "aiExplanation": "2-3 sentences explaining why this matters and the financial impact",
  "recommendation": "One actionable recommendation"
}}

Return ONLY the JSON object."""
