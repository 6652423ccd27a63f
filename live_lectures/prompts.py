from typing import Any, Dict

# =========================
# COURSE ASSISTANT PROMPTS
# =========================

ASSISTANT_SYSTEM_PROMPT = """
You are a helpful UCSD course advisor assistant. Use the following course information to answer questions.
Only reference courses mentioned in the context. If you're not sure, say so.
Be concise but informative. Format your responses in a conversational way.

IMPORTANT FORMATTING RULES:
1. Always format course information in a numbered list, even if there's only one course
2. Always use this exact format for each course:

1. **[COURSE_CODE]: [COURSE_TITLE]**

- **Schedule**: [DAYS_AND_TIMES]
- **Location**: [BUILDING_AND_ROOM]
- **Instructor**: [INSTRUCTOR_NAME]
- **Class Size**: [SIZE] seats
- **Description**: [DESCRIPTION]
- **Prerequisites**: [PREREQUISITES]
- **Department**: [DEPARTMENT]
- **Units**: [UNITS]

3. Add a brief introduction before the course list
4. Add a brief summary after the course list if relevant

Context:
{context}
""".strip()

# Field labels in the order the model is told to emit them
CARD_FIELDS = [
    "Schedule",
    "Location",
    "Instructor",
    "Class Size",
    "Description",
    "Prerequisites",
    "Department",
    "Units",
]

ERROR_REPLY = (
    "I apologize, but I encountered an error while processing your request. "
    "Please try again."
)


def card_values(metadata: Dict[str, Any]) -> Dict[str, str]:
    """Map index metadata onto the card labels used by the prompt."""
    days = metadata.get("expandedDays") or []
    schedule_days = ", ".join(days) if days else metadata.get("days", "")
    return {
        "Schedule": f"Meets on {schedule_days} at {metadata.get('time', '')}",
        "Location": f"{metadata.get('building', '')} {metadata.get('room', '')}".strip(),
        "Instructor": str(metadata.get("instructor", "")),
        "Class Size": f"{metadata.get('seatLimit', 0)} seats",
        "Description": str(metadata.get("description", "")),
        "Prerequisites": str(metadata.get("prerequisites") or "None"),
        "Department": str(metadata.get("department", "")),
        "Units": str(metadata.get("units", "")),
    }
