"""
MCP tool definitions for Trackfusion.

TOOLS declares every tool (name, description, JSON input schema).
handle_tool_call() routes a call to the matching TrackfusionClient method
and renders the result as text for the assistant.
"""

import json
import re
from typing import Any, Awaitable, Callable

from .api.client import TrackfusionClient

TASK_STATUSES = ["backlog", "todo", "in-progress", "testing", "done"]
TASK_PRIORITIES = ["low", "medium", "high", "urgent"]

ToolHandler = Callable[[TrackfusionClient, dict[str, Any]], Awaitable[str]]

_HANDLERS: dict[str, ToolHandler] = {}


def _tool(name: str) -> Callable[[ToolHandler], ToolHandler]:
    def register(func: ToolHandler) -> ToolHandler:
        _HANDLERS[name] = func
        return func

    return register


def _pick(arguments: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Copy only the keys the caller actually sent (explicit nulls included)."""
    return {key: arguments[key] for key in keys if key in arguments}


def _string(description: str) -> dict:
    return {"type": "string", "description": description}


def _date_range(noun: str) -> dict:
    return {
        "from": _string(f"Only {noun} on or after this date (YYYY-MM-DD)"),
        "to": _string(f"Only {noun} on or before this date (YYYY-MM-DD)"),
    }


def _no_args() -> dict:
    return {"type": "object", "properties": {}}


TOOLS = [
    # --- Projects & tasks ---
    {
        "name": "list_projects",
        "description": "List all Trackfusion projects with task counts and metadata",
        "inputSchema": {
            "type": "object",
            "properties": {
                "includeArchived": {
                    "type": "boolean",
                    "description": "Include archived projects (default: false)",
                },
            },
        },
    },
    {
        "name": "list_tasks",
        "description": "List tasks in a project, optionally filtered by status",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectId": _string("Project ID"),
                "status": _string(
                    "Filter by status: backlog, todo, in-progress, testing, done "
                    "(comma-separated for multiple)"
                ),
            },
            "required": ["projectId"],
        },
    },
    {
        "name": "get_task",
        "description": "Get full details of a specific task",
        "inputSchema": {
            "type": "object",
            "properties": {"taskId": _string("Task ID")},
            "required": ["taskId"],
        },
    },
    {
        "name": "create_task",
        "description": "Create a new task in a project",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectId": _string("Project ID"),
                "title": _string("Task title"),
                "description": _string("Task description"),
                "status": {
                    "type": "string",
                    "enum": TASK_STATUSES,
                    "description": "Initial status (default: todo)",
                },
                "priority": {
                    "type": "string",
                    "enum": TASK_PRIORITIES,
                    "description": "Priority (default: medium)",
                },
                "dueDate": _string("Due date in ISO format (YYYY-MM-DD or full ISO)"),
            },
            "required": ["projectId", "title"],
        },
    },
    {
        "name": "update_task",
        "description": "Update an existing task (title, description, status, priority, due date)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "taskId": _string("Task ID"),
                "title": _string("New title"),
                "description": _string("New description"),
                "status": {"type": "string", "enum": TASK_STATUSES, "description": "New status"},
                "priority": {
                    "type": "string",
                    "enum": TASK_PRIORITIES,
                    "description": "New priority",
                },
                "dueDate": {
                    "type": ["string", "null"],
                    "description": "New due date (ISO format), or null to clear",
                },
            },
            "required": ["taskId"],
        },
    },
    {
        "name": "delete_task",
        "description": "Delete a task",
        "inputSchema": {
            "type": "object",
            "properties": {"taskId": _string("Task ID")},
            "required": ["taskId"],
        },
    },
    # --- Habits ---
    {
        "name": "list_habits",
        "description": "List habits with their goals",
        "inputSchema": {
            "type": "object",
            "properties": {
                "active": {
                    "type": "boolean",
                    "description": "Only active (true) or only inactive (false) habits",
                },
            },
        },
    },
    {
        "name": "create_habit",
        "description": "Create a new habit",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": _string("Habit name"),
                "emoji": _string("Emoji shown next to the habit"),
                "goalFrequency": {
                    "type": "integer",
                    "description": "How many times per period",
                },
                "goalPeriod": {
                    "type": "string",
                    "enum": ["day", "week", "month"],
                    "description": "Goal period",
                },
                "startDate": _string("Start date (YYYY-MM-DD)"),
            },
            "required": ["name", "goalFrequency", "goalPeriod"],
        },
    },
    {
        "name": "toggle_habit_entry",
        "description": "Mark a habit as done (or undo it) for a given day",
        "inputSchema": {
            "type": "object",
            "properties": {
                "habitId": _string("Habit ID"),
                "date": _string("Date (YYYY-MM-DD)"),
            },
            "required": ["habitId", "date"],
        },
    },
    {
        "name": "get_habit_analytics",
        "description": "Get streaks and completion rate for a habit",
        "inputSchema": {
            "type": "object",
            "properties": {"habitId": _string("Habit ID")},
            "required": ["habitId"],
        },
    },
    # --- Items ---
    {
        "name": "list_items",
        "description": "List owned items, optionally filtered by status or category",
        "inputSchema": {
            "type": "object",
            "properties": {
                "status": _string("Item status (e.g. active, sold, broken)"),
                "categoryId": _string("Item category ID"),
            },
        },
    },
    {
        "name": "create_item",
        "description": "Record a purchased item",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": _string("Item name"),
                "categoryId": _string("Item category ID"),
                "purchaseDate": _string("Purchase date (YYYY-MM-DD)"),
                "purchasePrice": {"type": "number", "description": "Purchase price"},
                "currency": _string("Currency code, e.g. EUR"),
                "notes": _string("Free-form notes"),
            },
            "required": ["name", "categoryId", "purchaseDate", "purchasePrice", "currency"],
        },
    },
    {
        "name": "update_item",
        "description": "Update an item (name, category, status, price, notes)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "itemId": _string("Item ID"),
                "name": _string("New name"),
                "categoryId": _string("New category ID"),
                "status": _string("New status"),
                "purchasePrice": {"type": "number", "description": "New purchase price"},
                "notes": {"type": ["string", "null"], "description": "New notes, or null to clear"},
            },
            "required": ["itemId"],
        },
    },
    {
        "name": "delete_item",
        "description": "Delete an item",
        "inputSchema": {
            "type": "object",
            "properties": {"itemId": _string("Item ID")},
            "required": ["itemId"],
        },
    },
    {
        "name": "list_item_categories",
        "description": "List item categories",
        "inputSchema": _no_args(),
    },
    # --- Journal ---
    {
        "name": "list_journal_entries",
        "description": "List journal entries, optionally within a date range",
        "inputSchema": {"type": "object", "properties": _date_range("entries")},
    },
    {
        "name": "create_journal_entry",
        "description": "Write a new journal entry",
        "inputSchema": {
            "type": "object",
            "properties": {
                "title": _string("Entry title"),
                "content": _string("Entry body (HTML or plain text)"),
                "emoji": _string("Emoji for the entry"),
                "mood": _string("Mood, e.g. happy, calm, tired"),
                "date": _string("Entry date (YYYY-MM-DD, default: today)"),
            },
            "required": ["title", "content"],
        },
    },
    {
        "name": "get_day_entry",
        "description": "Get the day entry (daily notes) for a date",
        "inputSchema": {
            "type": "object",
            "properties": {"date": _string("Date (YYYY-MM-DD)")},
            "required": ["date"],
        },
    },
    {
        "name": "list_journal_todos",
        "description": "List journal todos",
        "inputSchema": {
            "type": "object",
            "properties": {
                "completed": {
                    "type": "boolean",
                    "description": "Only completed (true) or only pending (false) todos",
                },
            },
        },
    },
    {
        "name": "create_journal_todo",
        "description": "Add a journal todo",
        "inputSchema": {
            "type": "object",
            "properties": {
                "title": _string("Todo title"),
                "priority": {"type": "string", "enum": TASK_PRIORITIES, "description": "Priority"},
                "dueDate": _string("Due date (YYYY-MM-DD)"),
            },
            "required": ["title"],
        },
    },
    {
        "name": "update_journal_todo",
        "description": "Update a journal todo (complete it, rename it, change its due date)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "todoId": _string("Todo ID"),
                "title": _string("New title"),
                "isCompleted": {"type": "boolean", "description": "Completion state"},
                "priority": {
                    "type": "string",
                    "enum": TASK_PRIORITIES,
                    "description": "New priority",
                },
                "dueDate": {
                    "type": ["string", "null"],
                    "description": "New due date (YYYY-MM-DD), or null to clear",
                },
            },
            "required": ["todoId"],
        },
    },
    # --- Spending ---
    {
        "name": "list_spendings",
        "description": "List spendings, optionally filtered by date range, category or source",
        "inputSchema": {
            "type": "object",
            "properties": {
                **_date_range("spendings"),
                "categoryId": _string("Spending category ID"),
                "sourceId": _string("Payment source ID"),
            },
        },
    },
    {
        "name": "create_spending",
        "description": "Record a spending",
        "inputSchema": {
            "type": "object",
            "properties": {
                "description": _string("What the money was spent on"),
                "amount": {"type": "number", "description": "Amount spent"},
                "categoryId": _string("Spending category ID"),
                "sourceId": _string("Payment source ID"),
                "date": _string("Date (YYYY-MM-DD)"),
            },
            "required": ["description", "amount", "categoryId", "sourceId", "date"],
        },
    },
    {
        "name": "delete_spending",
        "description": "Delete a spending",
        "inputSchema": {
            "type": "object",
            "properties": {"spendingId": _string("Spending ID")},
            "required": ["spendingId"],
        },
    },
    {
        "name": "list_incomes",
        "description": "List incomes, optionally within a date range",
        "inputSchema": {"type": "object", "properties": _date_range("incomes")},
    },
    {
        "name": "list_spending_categories",
        "description": "List spending categories",
        "inputSchema": _no_args(),
    },
    {
        "name": "list_spending_sources",
        "description": "List payment sources (cards, accounts, cash)",
        "inputSchema": _no_args(),
    },
    {
        "name": "get_spending_analytics",
        "description": "Get spending and income totals for a month",
        "inputSchema": {
            "type": "object",
            "properties": {"month": _string("Month (YYYY-MM, default: current month)")},
        },
    },
    # --- People ---
    {
        "name": "list_people",
        "description": "List people with their relationship and recent interactions",
        "inputSchema": {
            "type": "object",
            "properties": {
                "search": _string("Search by name"),
                "relationshipTypeId": _string("Relationship type ID"),
            },
        },
    },
    {
        "name": "create_person",
        "description": "Add a person",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": _string("Full name"),
                "relationshipTypeId": _string("Relationship type ID"),
                "notes": _string("Notes about the person"),
                "birthday": _string("Birthday (YYYY-MM-DD)"),
            },
            "required": ["name", "relationshipTypeId"],
        },
    },
    {
        "name": "add_interaction",
        "description": "Log an interaction with a person",
        "inputSchema": {
            "type": "object",
            "properties": {
                "personId": _string("Person ID"),
                "typeId": _string("Interaction type ID"),
                "date": _string("Date (YYYY-MM-DD)"),
                "note": _string("What happened"),
            },
            "required": ["personId", "typeId", "date"],
        },
    },
    # --- Exercise ---
    {
        "name": "list_workout_sessions",
        "description": "List workout sessions with exercises and volume",
        "inputSchema": {"type": "object", "properties": _date_range("sessions")},
    },
    {
        "name": "create_workout_session",
        "description": "Log a workout session",
        "inputSchema": {
            "type": "object",
            "properties": {
                "date": _string("Date (YYYY-MM-DD)"),
                "name": _string("Session name, e.g. Push Day"),
                "durationMinutes": {"type": "integer", "description": "Duration in minutes"},
                "exercises": {
                    "type": "array",
                    "description": "Exercises performed",
                    "items": {
                        "type": "object",
                        "properties": {
                            "exerciseDefinitionId": _string("Exercise definition ID"),
                            "sets": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "reps": {"type": "integer", "description": "Repetitions"},
                                        "weight": {"type": "number", "description": "Weight"},
                                    },
                                    "required": ["reps"],
                                },
                            },
                        },
                        "required": ["exerciseDefinitionId", "sets"],
                    },
                },
            },
            "required": ["date", "exercises"],
        },
    },
    {
        "name": "list_workout_templates",
        "description": "List workout templates",
        "inputSchema": _no_args(),
    },
    {
        "name": "list_exercise_definitions",
        "description": "List known exercises and the muscle groups they train",
        "inputSchema": _no_args(),
    },
    {
        "name": "get_personal_records",
        "description": "Get personal records, optionally for one exercise",
        "inputSchema": {
            "type": "object",
            "properties": {"exerciseId": _string("Exercise definition ID")},
        },
    },
    # --- Portfolio ---
    {
        "name": "list_investment_transactions",
        "description": "List investment transactions",
        "inputSchema": {
            "type": "object",
            "properties": {
                "assetId": _string("Asset ID"),
                "type": {"type": "string", "enum": ["buy", "sell"], "description": "Transaction type"},
                **_date_range("transactions"),
            },
        },
    },
    {
        "name": "list_assets",
        "description": "List tracked assets",
        "inputSchema": {
            "type": "object",
            "properties": {"assetType": _string("Asset type, e.g. crypto, stock, etf")},
        },
    },
    {
        "name": "get_asset_price_history",
        "description": "Get the price history of an asset",
        "inputSchema": {
            "type": "object",
            "properties": {"assetId": _string("Asset ID"), **_date_range("prices")},
            "required": ["assetId"],
        },
    },
    {
        "name": "get_portfolio_summary",
        "description": "Get portfolio value, P&L, allocation and holdings",
        "inputSchema": _no_args(),
    },
]


# --- Formatting helpers ---


def _percent(part: float, total: float) -> int:
    """Rounded percentage, halves rounded up."""
    if total <= 0:
        return 0
    return int(part * 100 / total + 0.5)


def _day(value: str | None) -> str:
    return value[:10] if value else ""


def _join(lines: list[str], empty: str, sep: str = "\n") -> str:
    return sep.join(lines) if lines else empty


def _as_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _strip_html(text: str) -> str:
    return re.sub(r"<[^>]+>", "", text or "").strip()


def format_project(p: dict) -> str:
    counts = p.get("taskCounts") or {}
    total = sum(counts.values())
    done = counts.get("done", 0)
    pct = _percent(done, total)
    return (
        f"{p.get('emoji', '')} **{p.get('name')}** ({p.get('id')})\n"
        f"  Tasks: {total} total, {done} done ({pct}%)\n"
        f"  Status counts: {json.dumps(counts, separators=(',', ':'), ensure_ascii=False)}\n"
        f"  Last activity: {p.get('lastActivityAt')}"
    )


def _tag_names(task: dict) -> list[str]:
    return [tag["name"] for tag in task.get("tags") or []]


def format_task_line(t: dict) -> str:
    names = _tag_names(t)
    tags = f" [{', '.join(names)}]" if names else ""
    due = f" | Due: {t.get('dueDateString') or t['dueDate']}" if t.get("dueDate") else ""
    return f"- [{t.get('status')}] **{t.get('title')}** ({t.get('id')}) | Priority: {t.get('priority')}{tags}{due}"


def format_task_details(t: dict) -> str:
    names = _tag_names(t)
    lines = [
        f"**{t.get('title')}** ({t.get('id')})",
        f"Project: {t.get('projectId')}",
        f"Status: {t.get('status')} | Priority: {t.get('priority')}",
        f"Tags: {', '.join(names)}" if names else "Tags: none",
        f"Due: {t.get('dueDateString') or t['dueDate']}" if t.get("dueDate") else "Due: not set",
        f"Completed: {t['completedAt']}" if t.get("completedAt") else "",
        f"Created: {t.get('createdAt')} | Updated: {t.get('updatedAt')}",
        f"\nDescription:\n{t['description']}" if t.get("description") else "\nDescription: none",
    ]
    return "\n".join(line for line in lines if line)


def format_habit(h: dict) -> str:
    state = "Active" if h.get("isActive") else "Inactive"
    return (
        f"- {h.get('emoji', '')} **{h.get('name')}** ({h.get('id')}) | "
        f"Goal: {h.get('goalFrequency')}x per {h.get('goalPeriod')} | {state}"
    )


def format_item(i: dict) -> str:
    parts = [f"- **{i.get('name')}** ({i.get('id')})", str(i.get("status", "unknown"))]
    if i.get("purchasePrice") is not None:
        parts.append(f"{i['purchasePrice']} {i.get('currency', '')}".strip())
    if i.get("purchaseDate"):
        parts.append(f"Purchased: {_day(i['purchaseDate'])}")
    return " | ".join(parts)


def format_category(c: dict) -> str:
    emoji = f"{c['emoji']} " if c.get("emoji") else ""
    return f"- {emoji}{c.get('name')} ({c.get('id')})"


def format_journal_entry(e: dict) -> str:
    header = f"- {e.get('emoji', '')} **{e.get('title')}** ({e.get('id')})"
    if e.get("mood"):
        header += f" | Mood: {e['mood']}"
    if e.get("createdAt"):
        header += f" | {_day(e['createdAt'])}"
    snippet = _strip_html(e.get("content", ""))[:200]
    return f"{header}\n  {snippet}" if snippet else header


def format_todo(t: dict) -> str:
    box = "[x]" if t.get("isCompleted") else "[ ]"
    line = f"- {box} {t.get('title')} ({t.get('id')})"
    if t.get("priority"):
        line += f" | Priority: {t['priority']}"
    if t.get("dueDate"):
        line += f" | Due: {_day(t['dueDate'])}"
    return line


def format_spending(s: dict) -> str:
    label = s.get("description") or s.get("name") or ""
    return f"- {_day(s.get('date'))} | {label} | {s.get('amount') or 0:.2f} ({s.get('id')})"


def format_income(i: dict) -> str:
    return f"- {_day(i.get('date'))} | {i.get('name')} | {i.get('income') or 0:.2f} ({i.get('id')})"


def format_person(p: dict) -> str:
    parts = [f"- **{p.get('name')}** ({p.get('id')})"]
    if p.get("relationshipTypeName"):
        parts.append(p["relationshipTypeName"])
    if p.get("lastContactedAt"):
        parts.append(f"Last contact: {_day(p['lastContactedAt'])}")
    parts.append(f"Interactions: {len(p.get('interactions') or [])}")
    connections = [c.get("personName", "") for c in p.get("connections") or []]
    if connections:
        parts.append(f"Connections: {', '.join(connections)}")
    return " | ".join(parts)


def _format_sets(sets: list[dict]) -> str:
    return ", ".join(
        f"{s.get('reps')}x{s['weight']}" if s.get("weight") is not None else f"{s.get('reps')} reps"
        for s in sets
    )


def format_workout_session(s: dict) -> str:
    exercises = s.get("exercises") or []
    header = f"- {s.get('dateString', '')} **{s.get('name') or 'Workout'}** ({s.get('id')}) | {len(exercises)} exercises"
    if s.get("totalVolume") is not None:
        header += f" | Volume: {s['totalVolume']}"
    if s.get("durationMinutes"):
        header += f" | {s['durationMinutes']} min"
    lines = [header]
    for e in exercises:
        lines.append(f"  • {e.get('exerciseName', e.get('exerciseDefinitionId'))}: {_format_sets(e.get('sets') or [])}")
    return "\n".join(lines)


def format_holding(h: dict) -> str:
    return (
        f"- {h.get('symbol')} ({h.get('assetName')}): {h.get('quantity')} @ {h.get('currentPrice')} "
        f"= {h.get('currentValue')} | P&L: {h.get('pnl')} ({h.get('pnlPercent')}%)"
    )


def format_portfolio_summary(result: dict) -> str:
    s = result["summary"]
    lines = [
        f"Total value: {s.get('totalValue')}",
        f"Total invested: {s.get('totalInvested')}",
        f"P&L: {s.get('totalPnl')} ({s.get('totalPnlPercent')}%)",
        f"Holdings: {s.get('holdingCount')}",
        f"Allocation: {json.dumps(s.get('allocationByType') or {}, ensure_ascii=False)}",
    ]
    holdings = [format_holding(h) for h in result.get("holdings") or []]
    if holdings:
        lines.append("")
        lines.extend(holdings)
    return "\n".join(lines)


# --- Handlers: projects & tasks ---


@_tool("list_projects")
async def _list_projects(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    projects = await client.list_projects(arguments.get("includeArchived") or False)
    return _join([format_project(p) for p in projects], "No projects found.", sep="\n\n")


@_tool("list_tasks")
async def _list_tasks(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    tasks = await client.list_tasks(arguments["projectId"], arguments.get("status"))
    return _join([format_task_line(t) for t in tasks], "No tasks found.")


@_tool("get_task")
async def _get_task(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    return format_task_details(await client.get_task(arguments["taskId"]))


@_tool("create_task")
async def _create_task(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    fields = _pick(arguments, "title", "description", "status", "priority", "dueDate")
    task = await client.create_task(arguments["projectId"], fields)
    return f"✅ Task created: **{task.get('title')}** ({task.get('id')}) in status \"{task.get('status')}\""


@_tool("update_task")
async def _update_task(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    patch = _pick(arguments, "title", "description", "status", "priority", "dueDate")
    task = await client.update_task(arguments["taskId"], patch)
    return (
        f"✅ Task updated: **{task.get('title')}** ({task.get('id')}) - "
        f"status: {task.get('status')}, priority: {task.get('priority')}"
    )


@_tool("delete_task")
async def _delete_task(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    await client.delete_task(arguments["taskId"])
    return f"🗑️ Task deleted: {arguments['taskId']}"


# --- Handlers: habits ---


@_tool("list_habits")
async def _list_habits(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    habits = await client.list_habits(arguments.get("active"))
    return _join([format_habit(h) for h in habits], "No habits found.")


@_tool("create_habit")
async def _create_habit(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    fields = _pick(arguments, "name", "emoji", "goalFrequency", "goalPeriod", "startDate")
    habit = await client.create_habit(fields)
    return (
        f"✅ Habit created: **{habit.get('name')}** ({habit.get('id')}) - "
        f"{habit.get('goalFrequency')}x per {habit.get('goalPeriod')}"
    )


@_tool("toggle_habit_entry")
async def _toggle_habit_entry(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    result = await client.toggle_habit_entry(arguments["habitId"], arguments["date"])
    return f"Habit {arguments['habitId']} toggled {result.get('toggled')} for {result.get('date')}"


@_tool("get_habit_analytics")
async def _get_habit_analytics(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    analytics = await client.get_habit_analytics(arguments["habitId"])
    if analytics is None:
        return f"No analytics available for habit {arguments['habitId']}."
    rate = analytics.get("completionRate")
    lines = [
        f"Current streak: {analytics.get('currentStreak', 0)}",
        f"Longest streak: {analytics.get('longestStreak', 0)}",
    ]
    if rate is not None:
        lines.append(f"Completion rate: {_percent(rate, 1)}%")
    if analytics.get("totalCompletions") is not None:
        lines.append(f"Total completions: {analytics['totalCompletions']}")
    return "\n".join(lines)


# --- Handlers: items ---


@_tool("list_items")
async def _list_items(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    items = await client.list_items(arguments.get("status"), arguments.get("categoryId"))
    return _join([format_item(i) for i in items], "No items found.")


@_tool("create_item")
async def _create_item(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    fields = _pick(
        arguments, "name", "categoryId", "purchaseDate", "purchasePrice", "currency", "notes"
    )
    item = await client.create_item(fields)
    return f"✅ Item created: **{item.get('name')}** ({item.get('id')})"


@_tool("update_item")
async def _update_item(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    patch = _pick(arguments, "name", "categoryId", "status", "purchasePrice", "notes")
    item = await client.update_item(arguments["itemId"], patch)
    return f"✅ Item updated: **{item.get('name')}** ({item.get('id')}) - status: {item.get('status')}"


@_tool("delete_item")
async def _delete_item(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    await client.delete_item(arguments["itemId"])
    return f"🗑️ Item deleted: {arguments['itemId']}"


@_tool("list_item_categories")
async def _list_item_categories(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    categories = await client.list_item_categories()
    return _join([format_category(c) for c in categories], "No categories found.")


# --- Handlers: journal ---


@_tool("list_journal_entries")
async def _list_journal_entries(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    entries = await client.list_journal_entries(arguments.get("from"), arguments.get("to"))
    return _join([format_journal_entry(e) for e in entries], "No journal entries found.")


@_tool("create_journal_entry")
async def _create_journal_entry(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    entry = await client.create_journal_entry(
        _pick(arguments, "title", "content", "emoji", "mood", "date")
    )
    return f"✅ Journal entry created: **{entry.get('title')}** ({entry.get('id')})"


@_tool("get_day_entry")
async def _get_day_entry(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    entry = await client.get_day_entry(arguments["date"])
    if entry is None:
        return f"No day entry for {arguments['date']}."
    return _as_json(entry)


@_tool("list_journal_todos")
async def _list_journal_todos(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    todos = await client.list_journal_todos(arguments.get("completed"))
    return _join([format_todo(t) for t in todos], "No todos found.")


@_tool("create_journal_todo")
async def _create_journal_todo(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    todo = await client.create_journal_todo(_pick(arguments, "title", "priority", "dueDate"))
    return f"✅ Todo created: {todo.get('title')} ({todo.get('id')})"


@_tool("update_journal_todo")
async def _update_journal_todo(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    patch = _pick(arguments, "title", "isCompleted", "priority", "dueDate")
    todo = await client.update_journal_todo(arguments["todoId"], patch)
    return f"✅ Todo updated: {format_todo(todo)[2:]}"


# --- Handlers: spending ---


@_tool("list_spendings")
async def _list_spendings(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    spendings = await client.list_spendings(
        {
            "date_from": arguments.get("from"),
            "date_to": arguments.get("to"),
            "category_id": arguments.get("categoryId"),
            "source_id": arguments.get("sourceId"),
        }
    )
    return _join([format_spending(s) for s in spendings], "No spendings found.")


@_tool("create_spending")
async def _create_spending(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    fields = _pick(arguments, "description", "amount", "categoryId", "sourceId", "date")
    spending = await client.create_spending(fields)
    return f"✅ Spending recorded: {spending.get('description')} {spending.get('amount') or 0:.2f} ({spending.get('id')})"


@_tool("delete_spending")
async def _delete_spending(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    await client.delete_spending(arguments["spendingId"])
    return f"🗑️ Spending deleted: {arguments['spendingId']}"


@_tool("list_incomes")
async def _list_incomes(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    incomes = await client.list_incomes(arguments.get("from"), arguments.get("to"))
    return _join([format_income(i) for i in incomes], "No incomes found.")


@_tool("list_spending_categories")
async def _list_spending_categories(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    categories = await client.list_spending_categories()
    return _join([format_category(c) for c in categories], "No categories found.")


@_tool("list_spending_sources")
async def _list_spending_sources(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    sources = await client.list_spending_sources()
    return _join([format_category(s) for s in sources], "No sources found.")


@_tool("get_spending_analytics")
async def _get_spending_analytics(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    analytics = await client.get_spending_analytics(arguments.get("month"))
    if analytics is None:
        return f"No spending analytics for {arguments.get('month') or 'the current month'}."
    return _as_json(analytics)


# --- Handlers: people ---


@_tool("list_people")
async def _list_people(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    people = await client.list_people(
        {
            "search": arguments.get("search"),
            "relationship_type_id": arguments.get("relationshipTypeId"),
        }
    )
    return _join([format_person(p) for p in people], "No people found.")


@_tool("create_person")
async def _create_person(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    person = await client.create_person(
        _pick(arguments, "name", "relationshipTypeId", "notes", "birthday")
    )
    return f"✅ Person added: **{person.get('name')}** ({person.get('id')})"


@_tool("add_interaction")
async def _add_interaction(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    interaction = await client.add_interaction(
        arguments["personId"], _pick(arguments, "typeId", "date", "note")
    )
    note = f": {interaction['note']}" if interaction.get("note") else ""
    return f"✅ Interaction logged: {interaction.get('typeName')} on {interaction.get('dateString')}{note}"


# --- Handlers: exercise ---


@_tool("list_workout_sessions")
async def _list_workout_sessions(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    sessions = await client.list_workout_sessions(arguments.get("from"), arguments.get("to"))
    return _join([format_workout_session(s) for s in sessions], "No workout sessions found.")


@_tool("create_workout_session")
async def _create_workout_session(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    session = await client.create_workout_session(
        _pick(arguments, "date", "name", "durationMinutes", "exercises")
    )
    return f"✅ Workout logged ({session.get('id')})\n{format_workout_session(session)}"


@_tool("list_workout_templates")
async def _list_workout_templates(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    templates = await client.list_workout_templates()
    lines = [
        f"- **{t.get('name')}** ({t.get('id')}) | {len(t.get('exercises') or [])} exercises"
        for t in templates
    ]
    return _join(lines, "No workout templates found.")


@_tool("list_exercise_definitions")
async def _list_exercise_definitions(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    exercises = await client.list_exercise_definitions()
    lines = [
        f"- {e.get('name')} ({e.get('id')}) | {', '.join(e.get('muscleGroups') or [])}"
        for e in exercises
    ]
    return _join(lines, "No exercises found.")


@_tool("get_personal_records")
async def _get_personal_records(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    records = await client.get_personal_records(arguments.get("exerciseId"))
    lines = [
        f"- {r.get('exerciseName')}: {r.get('type')} {r.get('value')}"
        + (f" ({r['dateString']})" if r.get("dateString") else "")
        for r in records
    ]
    return _join(lines, "No personal records found.")


# --- Handlers: portfolio ---


@_tool("list_investment_transactions")
async def _list_investment_transactions(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    transactions = await client.list_investment_transactions(
        {
            "asset_id": arguments.get("assetId"),
            "type": arguments.get("type"),
            "date_from": arguments.get("from"),
            "date_to": arguments.get("to"),
        }
    )
    lines = [
        f"- {_day(t.get('date'))} {str(t.get('type', '')).upper()} {t.get('quantity')} "
        f"@ {t.get('price')} ({t.get('assetId')})"
        for t in transactions
    ]
    return _join(lines, "No transactions found.")


@_tool("list_assets")
async def _list_assets(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    assets = await client.list_assets(arguments.get("assetType"))
    lines = [
        f"- {a.get('symbol')} {a.get('name')} ({a.get('id')})"
        + (f" | {a['assetType']}" if a.get("assetType") else "")
        for a in assets
    ]
    return _join(lines, "No assets found.")


@_tool("get_asset_price_history")
async def _get_asset_price_history(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    history = await client.get_asset_price_history(
        arguments["assetId"], arguments.get("from"), arguments.get("to")
    )
    asset = history["asset"] or {}
    lines = [f"{asset.get('symbol')} {asset.get('name')} ({asset.get('id')})"]
    lines.extend(f"- {p.get('id')}: {p.get('price')}" for p in history["prices"])
    if not history["prices"]:
        lines.append("No prices recorded.")
    return "\n".join(lines)


@_tool("get_portfolio_summary")
async def _get_portfolio_summary(client: TrackfusionClient, arguments: dict[str, Any]) -> str:
    return format_portfolio_summary(await client.get_portfolio_summary())


async def handle_tool_call(
    client: TrackfusionClient, tool_name: str, arguments: dict[str, Any] | None
) -> str:
    """Route a tool call to the matching client method and render the result."""
    handler = _HANDLERS.get(tool_name)
    if handler is None:
        raise ValueError(f"Unknown tool: {tool_name}")
    return await handler(client, arguments or {})
