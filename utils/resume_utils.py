"""
utils/resume_utils.py

Purpose: Heuristic résumé parsing

- Contact details (name, email, phone, location)
- Work experience and education blocks
- Known skills and a short summary

Pure text in, plain dicts out. Results are best-effort; every field falls
back to an empty value.
"""

import re
from typing import Any, Dict, List, Optional

MAX_EXPERIENCE = 5
MAX_EDUCATION = 3
MAX_SKILLS = 10
SUMMARY_LIMIT = 300
DESCRIPTION_LIMIT = 200

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
NAME_PATTERN = re.compile(r"^([A-Z][a-z]+[ \t]+[A-Z][a-z]+)", re.MULTILINE)

LOCATION_PATTERNS = [
    re.compile(r"\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*,[ \t]*[A-Z]{2})\b"),
    re.compile(r"\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*,[ \t]*[A-Z][a-z]+)\b"),
]

# Title \n Company \n 01/2020 - Present  |  Title at Company (2019 - 2021)
EXPERIENCE_PATTERNS = [
    re.compile(
        r"([A-Z][A-Za-z \t]+?)[ \t]*\n[ \t]*([A-Z][A-Za-z \t&]+?)[ \t]*\n[ \t]*"
        r"(\d{1,2}/\d{4}[ \t]*-[ \t]*(?:\d{1,2}/\d{4}|Present))",
        re.IGNORECASE,
    ),
    re.compile(
        r"([A-Za-z \t]+?)[ \t]+at[ \t]+([A-Za-z \t&]+?)[ \t]*\((\d{4}[ \t]*-[ \t]*(?:\d{4}|Present))\)",
        re.IGNORECASE,
    ),
]

_DEGREE = r"(?:Degree|Bachelor|Master|PhD|B\.Tech|M\.Tech|B\.Sc|M\.Sc)"
EDUCATION_PATTERNS = [
    re.compile(
        r"([A-Za-z. \t]*" + _DEGREE + r"[A-Za-z. \t]*?)[ \t]*\n[ \t]*([A-Z][A-Za-z \t&]+?)[ \t]*\n[ \t]*(\d{4})",
        re.IGNORECASE,
    ),
    re.compile(
        r"([A-Za-z. \t]*" + _DEGREE + r"[A-Za-z. \t]*?)[ \t]+at[ \t]+([A-Za-z \t&]+?)[ \t]*\((\d{4})\)",
        re.IGNORECASE,
    ),
]

SUMMARY_PATTERNS = [
    # "Summary: ..." plus continuation lines that do not start a new heading
    re.compile(
        r"(?:Summary|Objective|Profile|About)[ \t]*[:\-][ \t]*([^\n]+(?:\n[^A-Za-z\n][^\n]*)*)",
        re.IGNORECASE,
    ),
    # First one to three sentences of the document
    re.compile(r"^([A-Z][^.]*\.(?:\s+[A-Z][^.]*\.){0,2})", re.MULTILINE),
]

DATE_HINT = re.compile(r"\d{4}|\d{1,2}/\d{4}|Present|\d{1,2}/\d{2}")

COMMON_SKILLS = [
    "JavaScript", "React", "Node.js", "Python", "Java", "C++", "HTML", "CSS",
    "SQL", "MongoDB", "Express", "Angular", "Vue.js", "TypeScript", "Git",
    "Docker", "AWS", "Azure", "Google Cloud", "Machine Learning", "Data Science",
    "Project Management", "Leadership", "Communication", "Problem Solving",
    "Agile", "Scrum", "DevOps", "CI/CD", "Testing", "REST API", "GraphQL",
    "PostgreSQL", "MySQL", "Redis", "Elasticsearch", "Kubernetes",
]

JOB_TITLE_WORDS = [
    "engineer", "developer", "manager", "director", "analyst", "designer",
    "consultant", "specialist", "coordinator", "administrator", "associate",
    "senior", "lead", "principal", "head", "chief", "vp", "president",
]

COMPANY_MARKERS = ("Inc", "Ltd", "LLC", "Corporation", "Company")


def is_job_title(line: str) -> bool:
    lowered = line.lower()
    return len(line) < 50 and any(word in lowered for word in JOB_TITLE_WORDS)


def is_company_name(line: str) -> bool:
    return len(line) < 50 or any(marker in line for marker in COMPANY_MARKERS)


def is_date_range(line: str) -> bool:
    return bool(DATE_HINT.search(line)) and any(sep in line for sep in ("-", "to", "–"))


def extract_location(text: str) -> str:
    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return ""


def _description_after(text: str, start: int) -> str:
    """
    Up to three lines following a matched entry, stopping at the next title.
    """
    lines = text[start:].split("\n")[1:]
    collected: List[str] = []
    for raw in lines:
        if len(collected) >= 3:
            break
        line = raw.strip()
        if is_job_title(line):
            break
        if line and not is_date_range(line):
            collected.append(line)
    return " ".join(collected)[:DESCRIPTION_LIMIT]


def _experience_from_lines(text: str) -> List[Dict[str, str]]:
    experiences = []
    current: Optional[Dict[str, str]] = None

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if is_job_title(line):
            if current:
                experiences.append(current)
            current = {"title": line, "company": "", "duration": "", "description": ""}
        elif current and not current["company"] and is_company_name(line):
            current["company"] = line
        elif current and not current["duration"] and is_date_range(line):
            current["duration"] = line
        elif current and current["company"] and current["duration"]:
            current["description"] = f"{current['description']} {line}".strip()

    if current:
        experiences.append(current)
    return experiences


def extract_experience(text: str) -> List[Dict[str, str]]:
    """
    Structured "title / company / dates" blocks first; when none are found,
    falls back to scanning lines for job titles.
    """
    experiences = []
    for pattern in EXPERIENCE_PATTERNS:
        for match in pattern.finditer(text):
            experiences.append({
                "title": match.group(1).strip(),
                "company": match.group(2).strip(),
                "duration": match.group(3).strip(),
                "description": _description_after(text, match.start()),
            })

    if not experiences:
        experiences = _experience_from_lines(text)
    return experiences[:MAX_EXPERIENCE]


def extract_education(text: str) -> List[Dict[str, str]]:
    education = []
    for pattern in EDUCATION_PATTERNS:
        for match in pattern.finditer(text):
            education.append({
                "degree": match.group(1).strip(),
                "institute": match.group(2).strip(),
                "year": match.group(3),
                "location": "",
            })
    return education[:MAX_EDUCATION]


def extract_skills(text: str) -> List[str]:
    lowered = text.lower()
    return [skill for skill in COMMON_SKILLS if skill.lower() in lowered][:MAX_SKILLS]


def extract_summary(text: str) -> str:
    for pattern in SUMMARY_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1).strip()[:SUMMARY_LIMIT]
    return ""


def parse_resume_text(text: str) -> Dict[str, Any]:
    """
    Parses plain résumé text.

    Returns:
        {"personal_info": {name, email, phone, location},
         "experience": [...], "education": [...], "skills": [...], "summary": str}
    """
    email = EMAIL_PATTERN.search(text)
    phone = PHONE_PATTERN.search(text)
    name = NAME_PATTERN.search(text)

    return {
        "personal_info": {
            "name": name.group(1) if name else "",
            "email": email.group(0) if email else "",
            "phone": phone.group(0).strip() if phone else "",
            "location": extract_location(text),
        },
        "experience": extract_experience(text),
        "education": extract_education(text),
        "skills": extract_skills(text),
        "summary": extract_summary(text),
    }
