# =============================================================================
# core/ui_strings.py - Base English UI Strings
# =============================================================================
# Source of truth for the English rows in ui_translations. Seeding English
# (POST /admin/translations/seed-en) writes these; every other language is
# translated from the English rows.
# =============================================================================

UI_STRINGS: dict[str, str] = {
    "nav.dashboard": "Dashboard",
    "nav.notes": "Notes",
    "nav.tasks": "Tasks",
    "nav.planner": "Planner",
    "nav.aiChat": "AI Hub Chat",
    "nav.travel": "Travel",
    "nav.settings": "Settings",

    "dashboard.title": "Dashboard",
    "dashboard.subtitle": "See your streak, daily score, notes and tasks in one place.",

    "notes.title": "Notes",
    "notes.subtitle": "Capture thoughts and let AI help you summarize or rewrite them.",
    "notes.placeholder": "Write a note...",
    "notes.toTasks": "Turn into tasks",

    "tasks.title": "Tasks",
    "tasks.subtitle": "Capture tasks, check them off, and keep track of your progress.",
    "tasks.reminder": "Remind me",
    "tasks.completed": "Completed",

    "aiChat.title": "AI Hub Chat",
    "aiChat.subtitle": "A general-purpose AI coach for planning, ideas and questions.",
    "aiChat.limitReached": "You've reached today's AI limit for your plan.",

    "billing.upgrade": "Upgrade to Pro",
    "billing.manage": "Manage subscription",

    "weeklyGoal.title": "Weekly goal",
    "weeklyGoal.refine": "Refine with AI",
}
