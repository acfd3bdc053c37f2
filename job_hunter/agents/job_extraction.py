"""Job extraction agent: distills a job posting into a structured JobAIData record."""

from __future__ import annotations

from job_hunter.agents.base import BaseAgent
from job_hunter.models.job import JobAIData, JobExtractionInput

SYSTEM_INSTRUCTION = """## ROLE AND GOAL ##
You are an expert recruitment data analyst. Your goal is not to scrape, but to distill the core, meaningful information from a job posting's content into a highly structured JSON object that matches the provided schema. You must read, understand, and synthesize the content to populate all required fields.

## INSTRUCTIONS & RULES ##
1.  **Analyze Holistically:** Read the entire job description to understand the full context before filling any fields.
2.  **Synthesize and Summarize:** For fields like `coreObjective`, form a new, insightful conclusion by connecting the role's duties to the company's overall mission. For lists, summarize the points concisely.
3.  **Classify, Don't Just Separate:** For the `qualifications` list, process each skill or requirement individually and classify its `type` as either "Must-have" or "Preferred". Do not try to split paragraphs; instead, create a new item in the list for each distinct qualification.
4.  **Be Specific and Atomic:**
* For `compensation` and `experienceRequirements`, extract specific numbers for the atomic fields (`minSalary`, `minYears`, etc.). Use the `notes` and `rawText` fields as an "escape hatch" to store the original text or any details that don't fit the structured fields.
* For `workModel` and `jobType`, you must use one of the specified `enum` values. If the work model is not mentioned, your default is "On-site".
5.  **Handle Missing Data:** If a non-required field's information (like `compensation`) is not present in the text, omit the field entirely from the output. If no salary is mentioned, do not copy phrases like "competitive salary".

## CONTENT TO ANALYZE ##"""

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

JOB_ANALYSIS_SCHEMA = {
    "type": "object",
    "description": (
        "A deeply analyzed and structured summary of a job posting, designed for reliable "
        "AI extraction based on classification and specific, atomic fields."
    ),
    "required": [
        "jobTitle", "companyName", "location", "workModel", "jobType", "coreObjective",
        "keySkillsAndTools", "experienceRequirements", "qualifications",
        "companyCulture", "applicationLogistics",
    ],
    "properties": {
        "jobTitle": {
            "type": "string",
            "description": "The exact, full job title as listed in the posting.",
        },
        "companyName": {
            "type": "string",
            "description": "The name of the company that is hiring.",
        },
        "location": {
            "type": "object",
            "description": "Structured location data.",
            "required": ["rawText"],
            "properties": {
                "city": {"type": "string", "description": "The city where the job is located."},
                "state": {"type": "string", "description": "The state, province, or region."},
                "country": {"type": "string", "description": "The country where the job is located."},
                "rawText": {
                    "type": "string",
                    "description": "The original, full location string as it appears in the posting.",
                },
            },
        },
        "workModel": {
            "type": "string",
            "description": "Classify the work model. If not specified, assume 'On-site'.",
            "enum": ["On-site", "Hybrid", "Remote"],
        },
        "jobType": {
            "type": "string",
            "description": "Classify the employment type.",
            "enum": ["Full-time", "Part-time", "Contract", "Internship", "Temporary"],
        },
        "compensation": {
            "type": "object",
            "description": "Structured salary and compensation details. Omit entirely if not present.",
            "properties": {
                "minSalary": {
                    "type": "number",
                    "description": "The lower end of the base salary range as a number. Exclude symbols and letters.",
                },
                "maxSalary": {
                    "type": "number",
                    "description": "The upper end of the base salary range as a number. Exclude symbols and letters.",
                },
                "currency": {
                    "type": "string",
                    "description": "The 3-letter currency code (e.g., 'AUD', 'USD').",
                },
                "period": {
                    "type": "string",
                    "description": "The pay period.",
                    "enum": ["yearly", "hourly", "monthly"],
                },
                "notes": {
                    "type": "string",
                    "description": (
                        "The original salary text and any non-salary details "
                        "(e.g., 'stock options', 'negotiable'). This is the 'escape hatch'."
                    ),
                },
            },
        },
        "coreObjective": {
            "type": "string",
            "description": (
                "Synthesize the purpose of the role into a single, concise sentence. "
                "Answer the question: 'Why does this job exist?'"
            ),
        },
        "keySkillsAndTools": {
            "type": "object",
            "description": "A categorized list of all skills and technologies mentioned.",
            "required": ["hardSkills", "softSkills", "toolsAndSoftware"],
            "properties": {
                "hardSkills": {**_STRING_LIST, "description": "Technical, measurable skills."},
                "softSkills": {**_STRING_LIST, "description": "Interpersonal skills and traits."},
                "toolsAndSoftware": {
                    **_STRING_LIST,
                    "description": "Specific software, platforms, or methodologies.",
                },
            },
        },
        "experienceRequirements": {
            "type": "object",
            "description": "Structured experience requirements.",
            "required": ["rawText"],
            "properties": {
                "minYears": {"type": "number", "description": "Minimum years of experience required."},
                "maxYears": {"type": "number", "description": "Maximum years of experience, if a range is given."},
                "rawText": {
                    "type": "string",
                    "description": "The original text describing the experience requirement. This is the 'escape hatch'.",
                },
            },
        },
        "qualifications": {
            "type": "array",
            "description": "Every qualification, each individually classified.",
            "items": {
                "type": "object",
                "required": ["detail", "type"],
                "properties": {
                    "detail": {
                        "type": "string",
                        "description": "The specific skill, certification, or qualification.",
                    },
                    "type": {
                        "type": "string",
                        "description": "Whether the qualification is essential or a nice-to-have.",
                        "enum": ["Must-have", "Preferred"],
                    },
                },
            },
        },
        "companyCulture": {
            "type": "object",
            "description": "Analysis of the company's culture and tone from the text.",
            "properties": {
                "tone": {
                    "type": "string",
                    "description": "The company tone (e.g., 'Corporate & Formal', 'Startup & Casual').",
                },
                "keyAdjectives": {
                    **_STRING_LIST,
                    "description": "Impactful adjectives used to describe the company, team, or role.",
                },
            },
        },
        "applicationLogistics": {
            "type": "object",
            "description": "Key details for the application process.",
            "properties": {
                "instructions": {
                    "type": "string",
                    "description": "Summary of any specific instructions for how to apply.",
                },
                "closingDate": {
                    "type": "string",
                    "description": "The application closing date in YYYY-MM-DD format, if available.",
                    "format": "date",
                },
            },
        },
    },
}


class JobExtractionAgent(BaseAgent[JobExtractionInput, JobAIData]):
    """Extracts structured job data from page content."""

    name = "job-extraction"
    description = "Extracts structured job data from page content using AI analysis"
    input_model = JobExtractionInput
    output_model = JobAIData
    system_instruction = SYSTEM_INSTRUCTION
    response_schema = JOB_ANALYSIS_SCHEMA
    temperature = 0.8
    max_output_tokens = 4000
    # -1 lets the model pick its own thinking budget
    thinking_budget = -1

    def _is_valid(self, data: JobExtractionInput) -> bool:
        return bool(data.content.strip() and data.url.strip())

    def build_user_text(self, data: JobExtractionInput) -> str:
        return data.content

    @property
    def invalid_input_message(self) -> str:
        return "Invalid input: content and URL are required"
