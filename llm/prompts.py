# =============================================================================
# llm/prompts.py - Prompt Templates
# =============================================================================
# System prompts and prompt builders for every AI feature:
# - Coach chat and conversation titles
# - Notes/tasks summary (with tone and focus area)
# - Daily task creator and note-to-tasks extraction
# - Free-text translation and UI string translation
# - Travel itineraries and weekly goal refinement
# - Daily plans, evening reflections and day scores
# - Weekly action plans and weekly report reflections
# =============================================================================

from __future__ import annotations

import json
from typing import Any

APP_NAME = "AI Productivity Hub"

# =============================================================================
# Chat
# =============================================================================

COACH_SYSTEM_PROMPT = (
    f"You are the AI coach in a productivity app called {APP_NAME}. "
    "Be friendly, concise, and practical. Help with planning, focus, mindset, and general questions."
)

TITLE_SYSTEM_PROMPT = (
    "You are helping name chat conversations. "
    "Return a very short (3-6 words) descriptive title. "
    "Do not use quotes or punctuation at the start/end."
)

# =============================================================================
# Summary
# =============================================================================

TONE_DESCRIPTIONS: dict[str, str] = {
    "friendly": "Use a warm, friendly, and encouraging tone.",
    "direct": "Be concise, straightforward, and to the point. Avoid fluff.",
    "motivational": "Be energetic and motivational, but still practical.",
    "casual": "Use a relaxed, casual tone, like chatting with a friend.",
    "balanced": "Use a balanced, clear, and professional but approachable tone.",
}


def tone_description(ai_tone: str | None) -> str:
    """Tone line for a profile's ai_tone; unknown or empty means balanced."""
    return TONE_DESCRIPTIONS.get(ai_tone or "balanced", TONE_DESCRIPTIONS["balanced"])


def build_summary_messages(
    notes: list[dict[str, Any]],
    tasks: list[dict[str, Any]],
    ai_tone: str | None = None,
    focus_area: str | None = None,
    language_line: str | None = None,
) -> list[dict[str, str]]:
    """Messages for the notes/tasks overview."""
    notes_text = "\n".join(f"- {n.get('content', '')}" for n in notes)
    tasks_text = "\n".join(
        f"- {t.get('title', '')}" + (f" - {t['description']}" if t.get("description") else "")
        for t in tasks
    )
    context = (
        f"Recent notes:\n{notes_text or '(no recent notes)'}\n\n"
        f"Recent tasks:\n{tasks_text or '(no recent tasks)'}"
    )

    system = (
        f'You are an AI summarizer inside a productivity app called "{APP_NAME}".\n'
        "Given the user's recent notes and tasks, create a very concise overview.\n\n"
        f"{tone_description(ai_tone)}"
    )
    if focus_area:
        system += (
            f'\nThe user\'s main focus area is: "{focus_area}". '
            "Tailor your insights towards that area where helpful."
        )
    if language_line:
        system += f"\n{language_line}"

    user = (
        f"{context}\n\n"
        "Write: 1) a 2-3 sentence overview, 2) three bullet-point priorities for today, "
        "3) one short suggestion to stay on track."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


# =============================================================================
# Task Creator / Note to Tasks
# =============================================================================

STRICT_JSON_SYSTEM_PROMPT = "You are a helpful productivity coach that outputs STRICT JSON only."


def build_task_creator_prompt(profile: dict[str, Any]) -> str:
    """
    Prompt for a personalized task list for today.

    `profile` holds the questionnaire answers (all optional).
    """
    def val(key: str, default: str = "not specified") -> str:
        value = profile.get(key)
        return str(value) if value not in (None, "") else default

    return f"""
You are an expert productivity coach.
The user wants a realistic, personalized task list for TODAY only.

User profile:
- Gender: {val("gender")}
- Age range: {val("age_range")}
- Main role: {val("job_role")}
- Day type: {val("work_type")}
- Hobbies / interests: {val("hobbies")}

Today's context:
- Plan / events: {val("today_plan")}
- Main goal today: {val("main_goal")}
- Hours available: {val("hours_available")}
- Energy level (1-10): {val("energy_level")}
- Intensity preference: {val("intensity", "balanced")}

Instructions:
1. Propose a realistic list of TASKS for TODAY only.
2. Mix work/study tasks with at most 1-2 life/health/rest tasks.
3. Break bigger goals into small, actionable tasks (20-40 min each).
4. The total number of tasks should match their hours and intensity:
   - "<1 hour": 2-3 small tasks
   - "1-2": 4-6 small tasks
   - "2-4": 6-10 tasks total
   - "4plus": 8-12 tasks total
5. If energy is very low (<= 3), include "recovery" and ultra-simple tasks.
6. If energy is high (>= 8) and intensity is "aggressive", include 1-2 deeper-focus tasks.

Return ONLY valid JSON with this shape, nothing else:
{{
  "tasks": [
    {{
      "title": "short actionable task",
      "category": "Work" | "Study" | "Life" | "Health" | "Admin" | "Deep work",
      "size": "small" | "medium" | "big"
    }}
  ]
}}
""".strip()


def build_note_to_tasks_prompt(content: str) -> str:
    return f"""
Extract actionable tasks from the note below.

Return ONLY valid JSON in this exact shape:
{{
  "tasks": [
    {{
      "title": "Task title",
      "due_natural": "tomorrow morning",
      "priority": "low" | "medium" | "high"
    }}
  ]
}}

If no tasks exist, return:
{{ "tasks": [] }}

NOTE:
{content}
""".strip()


# =============================================================================
# Translation
# =============================================================================

TRANSLATE_SYSTEM_PROMPT = (
    "You are a translation engine. "
    "Translate the user text into the requested target language. "
    "Return only the translated text, no explanations."
)


def build_batch_translation_messages(
    texts: list[str],
    source_name: str,
    target_name: str,
) -> list[dict[str, str]]:
    """
    Messages asking for {"translations": [...]} with one entry per input, in order.
    """
    system = (
        "You are a professional UI translator for a productivity web app. "
        f"Translate short interface strings from {source_name} to {target_name}. "
        "Keep placeholders like {name} or {{count}}, HTML tags and emoji unchanged. "
        'Respond with a JSON object {"translations": [...]} containing exactly one '
        "translated string per input, in the same order."
    )
    user = json.dumps({"texts": texts}, ensure_ascii=False)
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def build_full_language_messages(
    base: dict[str, str],
    target_name: str,
) -> list[dict[str, str]]:
    """Messages translating a whole {key: english} map in one JSON object."""
    system = (
        "You translate UI strings for a productivity web app. "
        f"Translate every VALUE of the JSON object from English to {target_name}. "
        "Keep every KEY exactly as it is. Keep placeholders and emoji unchanged. "
        "Return ONLY the translated JSON object."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": json.dumps(base, ensure_ascii=False)},
    ]


# =============================================================================
# Travel / Goals
# =============================================================================

TRAVEL_SYSTEM_PROMPT = """
You are a helpful AI travel planner.
Given a destination, dates, number of people and rough budget,
propose a simple, practical itinerary.

Rules:
- Keep it concise and skimmable (max ~500 words).
- Break down by day (Day 1, Day 2, etc.).
- Suggest 2-3 main activities per day, with short descriptions.
- Include a short "Overall tips" section at the end (transport, neighborhoods, weather notes).
- DO NOT recommend specific hotels by name (the user will browse accommodations separately).
- Focus on practical sightseeing + rest balance, not generic filler.
""".strip()


def build_travel_prompt(
    destination: str,
    checkin: str,
    checkout: str,
    adults: int = 1,
    children: int = 0,
    min_budget: float | None = None,
    max_budget: float | None = None,
) -> str:
    people = f"{adults or 1} adult(s)" + (f", {children} child(ren)" if children else "")
    if min_budget or max_budget:
        budget = (
            f"With a budget between {min_budget or '?'} and {max_budget or '?'} "
            "(currency user prefers)."
        )
    else:
        budget = "Budget is flexible or not specified."
    return (
        f"Destination: {destination}\n"
        f"Dates: {checkin} -> {checkout}\n"
        f"People: {people}\n"
        f"Budget: {budget}"
    )


GOAL_SYSTEM_PROMPT = (
    "You are a productivity coach. You rewrite goals to be specific, realistic and "
    "motivating, without changing their meaning."
)


def build_goal_refine_prompt(goal_text: str) -> str:
    return (
        "Rewrite this weekly goal to be specific, realistic, and action-focused,\n"
        f'in one short sentence.\n\nOriginal goal: "{goal_text}"'
    )


# =============================================================================
# Daily Planning
# =============================================================================

PLANNER_OUTPUT_FORMAT = """
Output format (no markdown tables):
- One motivating sentence
- "Today's Top 3" (bullets)
- "Suggested order" with morning / afternoon / evening blocks (bullets)
- 2-3 focus tips (bullets)
""".strip()


def _planner_system(language: str, ai_tone: str | None, focus_area: str | None, output_format: str) -> str:
    system = (
        f"You are an AI daily planner inside {APP_NAME}.\n\n"
        f"Respond ONLY in {language}. Never use any other language.\n"
        f"{tone_description(ai_tone)}"
    )
    if focus_area:
        system += f'\nThe user\'s main focus area is "{focus_area}".'
    return f"{system}\n{output_format}"


def format_open_tasks(tasks: list[dict[str, Any]]) -> str:
    """Numbered task lines with optional description and due date."""
    lines = []
    for i, task in enumerate(tasks, start=1):
        desc = f" - {task['description']}" if task.get("description") else ""
        due = f" (due: {task['due_date']})" if task.get("due_date") else ""
        lines.append(f"{i}. {task.get('title') or '(untitled task)'}{desc}{due}")
    return "\n".join(lines)


def build_daily_plan_messages(
    tasks: list[dict[str, Any]],
    today: str,
    language: str = "English",
    ai_tone: str | None = None,
    focus_area: str | None = None,
) -> list[dict[str, str]]:
    """Plan for today from the user's open tasks."""
    context = f"Today: {today}\n\nUser's open tasks:\n{format_open_tasks(tasks) or '(no open tasks)'}"
    return [
        {"role": "system", "content": _planner_system(language, ai_tone, focus_area, PLANNER_OUTPUT_FORMAT)},
        {"role": "user", "content": context},
    ]


MORNING_OUTPUT_FORMAT = """
Output format (use clean headings + bullets, no markdown fences):
- A short motivating line
- TOP 3 PRIORITIES:
- SCHEDULE: (morning / afternoon / evening blocks)
- FOCUS TIPS: (2-3 bullets)
""".strip()


def build_morning_plan_messages(
    today: str,
    day_description: str,
    priorities: list[str],
    language: str = "English",
    ai_tone: str | None = None,
    focus_area: str | None = None,
) -> list[dict[str, str]]:
    """Plan for today from what the user wrote in the morning check-in."""
    numbered = "\n".join(f"{i}. {p}" for i, p in enumerate(priorities, start=1))
    user = (
        f"Date: {today}\n\n"
        f"User notes:\n{day_description or '(none)'}\n\n"
        f"Top priorities:\n{numbered or '(none)'}\n\n"
        "Make a realistic plan for today."
    )
    return [
        {"role": "system", "content": _planner_system(language, ai_tone, focus_area, MORNING_OUTPUT_FORMAT)},
        {"role": "user", "content": user},
    ]


def build_evening_reflection_prompt(reflection: str, language: str = "English") -> str:
    return f"""
You are a supportive productivity coach.
The user is reflecting on their day.

Please return a clear, readable reflection with this structure:

WINS:
- 2-3 concrete things they did well

IMPROVEMENTS:
- 1-2 gentle areas to improve (no shaming)

ADJUSTMENTS FOR TOMORROW:
- 3 specific, practical changes they can try

Keep the tone supportive and encouraging.
Do NOT use markdown, emojis, or long paragraphs.
Keep it concise and human.

IMPORTANT: Respond in {language}.

User reflection:
{reflection}
""".strip()


def build_score_prompt(tasks: list[dict[str, Any]], notes: list[dict[str, Any]]) -> str:
    """Ask for {"score": 0-100, "reason": "..."} from today's tasks and recent notes."""
    tasks_text = "\n".join(
        f"- [{'x' if t.get('completed') else ' '}] {t.get('title') or '(untitled task)'}" for t in tasks
    ) or "No tasks today."
    notes_text = "\n".join(
        f"- {(n.get('content') or '')[:200] or '(empty note)'}" for n in notes
    ) or "No notes captured."
    return f"""
You are helping a user rate how their day went from 0 to 100.
- 0 = terrible day, everything felt off.
- 50 = mixed day, some things done but also stress / distractions.
- 100 = excellent day, they did what mattered and felt good about it.

You will see their tasks and notes for today. Based on that, suggest a realistic score between 0 and 100 and a short explanation.

User's tasks today:
{tasks_text}

User's recent notes:
{notes_text}

Respond ONLY in strict JSON like:
{{"score": 72, "reason": "Short explanation here"}}
""".strip()


# =============================================================================
# Weekly Review
# =============================================================================

WEEKLY_ACTION_PLAN_SYSTEM_PROMPT = """
You are an encouraging productivity coach.
Given a summary of the user's last 7 days (tasks, notes, AI usage, productivity scores, and weekly goal),
create a short, practical Weekly Action Plan.

Structure it as plain text only (no markdown), with these sections:

1) "Top priorities this week:"
   - 3 bullet points for the most important outcomes.

2) "Supporting tasks:"
   - 3 bullet points of helpful but secondary tasks.

3) "Habits to focus on:"
   - 2 bullet points for habits or routines.

4) "Things to avoid or reduce:"
   - 2 bullet points on distractions or low-value work.

5) "One big thing:"
   - 1-2 sentences describing the single most important win for the week.

Be concise, direct, and positive. Make it feel realistic based on the data.
If there's very little data, propose generic but helpful suggestions.
""".strip()


def build_weekly_action_plan_payload(
    start_date: str,
    end_date: str,
    goal: dict[str, Any] | None,
    stats: dict[str, Any],
    samples: dict[str, list[dict[str, Any]]],
) -> str:
    """The compact JSON summary the action plan is written from."""
    return json.dumps(
        {
            "weekRange": {"startDate": start_date, "endDate": end_date},
            "weeklyGoal": goal,
            "stats": stats,
            "samples": samples,
        },
        ensure_ascii=False,
        default=str,
    )


def build_weekly_reflection_messages(
    wins_block: str,
    goal_line: str,
    note_labels: list[str],
    language: str = "English",
) -> list[dict[str, str]]:
    """A 3-4 sentence reflection plus three focus bullets for next week."""
    notes_text = "\n".join(f"{i}. {label}" for i, label in enumerate(note_labels, start=1))
    user = "\n".join([
        "You are an AI productivity coach.",
        "",
        "The user's weekly stats:",
        wins_block,
        "",
        goal_line,
        "",
        "Top notes of the week:",
        notes_text or "No notes this week.",
        "",
        f"Write in {language}:",
        "1) A short 3-4 sentence reflection of their week (what seems to be happening, "
        "how they used AI, and how it relates to their weekly goal).",
        "2) Then a clear section titled: 'Focus for next week:' followed by 3 specific "
        "bullet-point suggestions.",
        "",
        "Plain text only, no markdown headings.",
    ])
    return [
        {"role": "system", "content": f"You are an encouraging productivity coach. Reply in {language}."},
        {"role": "user", "content": user},
    ]
