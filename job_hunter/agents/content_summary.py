"""Content summary agent for long page content."""

from __future__ import annotations

from job_hunter.agents.base import BaseAgent
from job_hunter.models.summary import ContentSummaryInput, ContentSummaryOutput

SYSTEM_INSTRUCTION = """You are an expert content summarizer. Your task is to create concise, accurate summaries of provided content.

## Instructions:
1. Create a clear, concise summary that captures the main points
2. Extract 3-5 key points that are most important
3. Maintain accuracy and avoid adding information not in the original
4. Use professional, clear language
5. Respect any specified focus areas or length limits

## Output Format:
- summary: A concise paragraph summarizing the content
- keyPoints: Array of 3-5 most important points
- wordCount: Number of words in the summary"""

SUMMARY_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "A concise summary of the content",
        },
        "keyPoints": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Key points extracted from the content",
        },
        "wordCount": {
            "type": "number",
            "description": "Number of words in the summary",
        },
    },
    "required": ["summary", "keyPoints", "wordCount"],
}


class ContentSummaryAgent(BaseAgent[ContentSummaryInput, ContentSummaryOutput]):
    name = "content-summary"
    description = "Summarizes long content into concise, structured summaries"
    input_model = ContentSummaryInput
    output_model = ContentSummaryOutput
    system_instruction = SYSTEM_INSTRUCTION
    response_schema = SUMMARY_SCHEMA
    temperature = 0.3
    max_output_tokens = 1000

    def _is_valid(self, data: ContentSummaryInput) -> bool:
        return bool(data.content.strip())

    def build_user_text(self, data: ContentSummaryInput) -> str:
        focus = f"\n\nFocus on: {data.focus}" if data.focus else ""
        length = f"\n\nKeep summary under {data.max_length} words." if data.max_length else ""
        return f"Please summarize the following content:{focus}{length}\n\n{data.content}"
