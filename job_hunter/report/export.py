"""Plain-text rendering of job records for display and download."""

from __future__ import annotations

from datetime import datetime

from job_hunter.models.job import JobCompensation, JobRecord

NOT_AVAILABLE = "N/A"


def truncate_text(text: str, max_length: int) -> str:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_date(value: str) -> str:
    """Render an ISO timestamp as e.g. ``5 Mar 2025``."""
    if not value:
        return NOT_AVAILABLE
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return "Invalid Date"
    return f"{dt.day} {dt.strftime('%b %Y')}"


def _format_number(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


def _salary_range(compensation: JobCompensation, separator: str) -> str:
    low, high = compensation.min_salary, compensation.max_salary
    if low and high:
        return f"{_format_number(low)}{separator}{_format_number(high)}"
    if low:
        return f"{_format_number(low)}+"
    if high:
        return f"Up to {_format_number(high)}"
    return ""


def format_salary(compensation: JobCompensation | None, max_length: int = 15) -> str:
    """Compact salary text for list views."""
    if compensation is None:
        return NOT_AVAILABLE

    text = _salary_range(compensation, "-")
    if text:
        if compensation.currency:
            text += f" {compensation.currency}"
    elif compensation.notes:
        text = compensation.notes
    else:
        return NOT_AVAILABLE

    return truncate_text(text, max_length)


def format_salary_detailed(compensation: JobCompensation | None) -> str:
    if compensation is None:
        return NOT_AVAILABLE

    parts: list[str] = []
    salary = _salary_range(compensation, " - ")
    if salary:
        parts.append(salary)
        if compensation.currency:
            parts.append(compensation.currency)
        if compensation.period:
            parts.append(f"per {compensation.period}")
    if compensation.notes:
        parts.append(compensation.notes)

    return " ".join(parts) if parts else NOT_AVAILABLE


def _join(items: list[str] | None) -> str:
    return ", ".join(items) if items else NOT_AVAILABLE


def generate_job_text_content(job: JobRecord) -> str:
    """Full plain-text description of a saved job."""
    ai = job.ai_data
    location = ai.location.raw_text or ai.location.city or NOT_AVAILABLE
    skills = ai.key_skills_and_tools
    culture = ai.company_culture
    logistics = ai.application_logistics
    qualifications = (
        "\n".join(f"- {q.detail} ({q.type})" for q in ai.qualifications)
        if ai.qualifications
        else NOT_AVAILABLE
    )

    return f"""Job Title: {ai.job_title or NOT_AVAILABLE}
Company: {ai.company_name or NOT_AVAILABLE}
Location: {location}
Work Model: {ai.work_model.value}
Job Type: {ai.job_type.value}
Compensation: {format_salary_detailed(ai.compensation)}
Status: {job.status.value}
Saved Date: {format_date(job.saved_date)}
Source URL: {job.source_url or NOT_AVAILABLE}

Core Objective:
{ai.core_objective or NOT_AVAILABLE}

Experience Requirements:
{ai.experience_requirements.raw_text or NOT_AVAILABLE}

Hard Skills:
{_join(skills.hard_skills)}

Soft Skills:
{_join(skills.soft_skills)}

Tools & Software:
{_join(skills.tools_and_software)}

Qualifications:
{qualifications}

Company Culture:
Tone: {culture.tone or NOT_AVAILABLE}
Key Adjectives: {_join(culture.key_adjectives)}

Application Instructions:
{logistics.instructions or NOT_AVAILABLE}
Closing Date: {logistics.closing_date or NOT_AVAILABLE}
"""
