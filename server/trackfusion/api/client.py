"""
Trackfusion API client.

One coroutine per remote operation. Each builds its path and query string,
delegates to the RequestExecutor and unwraps the response envelope
(``{"<field>": payload}``) to the payload. Errors from the executor
propagate unchanged.
"""

from typing import Any, Mapping

import httpx

from ..config import ClientConfig
from .base import (
    Asset,
    AssetPriceHistory,
    Category,
    CreateHabitInput,
    CreateInteractionInput,
    CreateItemInput,
    CreateJournalEntryInput,
    CreateJournalTodoInput,
    CreatePersonInput,
    CreateSpendingInput,
    CreateTaskInput,
    CreateWorkoutSessionInput,
    DayEntry,
    ExerciseDefinition,
    Habit,
    HabitAnalytics,
    HabitToggle,
    HttpMethod,
    Income,
    Interaction,
    InvestmentTransaction,
    Item,
    ItemPatch,
    JournalEntry,
    JournalTodo,
    JournalTodoPatch,
    PeopleFilters,
    Person,
    PersonalRecord,
    PortfolioSummary,
    Project,
    RequestDescriptor,
    Spending,
    SpendingAnalytics,
    SpendingFilters,
    SpendingSource,
    Task,
    TaskPatch,
    TrackfusionError,
    TransactionFilters,
    WorkoutSession,
    WorkoutTemplate,
)
from .executor import RETRY_DELAY_SECONDS, RequestExecutor, build_query


def _unwrap(data: Any, field: str) -> Any:
    """Return ``data[field]``; a present null comes back as None."""
    if not isinstance(data, dict) or field not in data:
        raise TrackfusionError(f"Unexpected response: missing '{field}'")
    return data[field]


def _payload(fields: Mapping[str, Any]) -> dict[str, Any]:
    # Only keys the caller provided are sent; None stays None (JSON null).
    return dict(fields)


class TrackfusionClient:
    """Async client for the Trackfusion REST API."""

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ):
        self.config = config
        self.executor = RequestExecutor(config, transport=transport, retry_delay=retry_delay)

    async def _request(
        self,
        path: str,
        method: HttpMethod = "GET",
        body: Any = None,
    ) -> Any:
        return await self.executor.execute(RequestDescriptor(path=path, method=method, body=body))

    # ---------- Projects ----------

    async def list_projects(self, include_archived: bool = False) -> list[Project]:
        qs = build_query({"includeArchived": True if include_archived else None})
        data = await self._request(f"/projects{qs}")
        return _unwrap(data, "projects")

    async def list_tasks(self, project_id: str, status: str | None = None) -> list[Task]:
        """List tasks; ``status`` may be comma-separated (e.g. "todo,in-progress")."""
        qs = build_query({"status": status or None})
        data = await self._request(f"/projects/{project_id}/tasks{qs}")
        return _unwrap(data, "tasks")

    async def get_task(self, task_id: str) -> Task:
        data = await self._request(f"/tasks/{task_id}")
        return _unwrap(data, "task")

    async def create_task(self, project_id: str, task: CreateTaskInput) -> Task:
        data = await self._request(f"/projects/{project_id}/tasks", "POST", _payload(task))
        return _unwrap(data, "task")

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        """PATCH a task. ``{"dueDate": None}`` clears the due date."""
        data = await self._request(f"/tasks/{task_id}", "PATCH", _payload(patch))
        return _unwrap(data, "task")

    async def delete_task(self, task_id: str) -> None:
        await self._request(f"/tasks/{task_id}", "DELETE")

    # ---------- Habits ----------

    async def list_habits(self, active: bool | None = None) -> list[Habit]:
        data = await self._request(f"/habits{build_query({'active': active})}")
        return _unwrap(data, "habits")

    async def create_habit(self, habit: CreateHabitInput) -> Habit:
        data = await self._request("/habits", "POST", _payload(habit))
        return _unwrap(data, "habit")

    async def toggle_habit_entry(self, habit_id: str, date: str) -> HabitToggle:
        # Bare response: {"toggled": "on"|"off", "date": ...}
        return await self._request(f"/habits/{habit_id}/entries", "POST", {"date": date})

    async def get_habit_analytics(self, habit_id: str) -> HabitAnalytics | None:
        data = await self._request(f"/habits/{habit_id}/analytics")
        return _unwrap(data, "analytics")

    # ---------- Items ----------

    async def list_items(
        self, status: str | None = None, category_id: str | None = None
    ) -> list[Item]:
        qs = build_query({"status": status, "categoryId": category_id})
        data = await self._request(f"/items{qs}")
        return _unwrap(data, "items")

    async def create_item(self, item: CreateItemInput) -> Item:
        data = await self._request("/items", "POST", _payload(item))
        return _unwrap(data, "item")

    async def update_item(self, item_id: str, patch: ItemPatch) -> Item:
        data = await self._request(f"/items/{item_id}", "PATCH", _payload(patch))
        return _unwrap(data, "item")

    async def delete_item(self, item_id: str) -> None:
        await self._request(f"/items/{item_id}", "DELETE")

    async def list_item_categories(self) -> list[Category]:
        data = await self._request("/item-categories")
        return _unwrap(data, "categories")

    # ---------- Journal ----------

    async def list_journal_entries(
        self, date_from: str | None = None, date_to: str | None = None
    ) -> list[JournalEntry]:
        qs = build_query({"from": date_from, "to": date_to})
        data = await self._request(f"/journal-entries{qs}")
        return _unwrap(data, "entries")

    async def create_journal_entry(self, entry: CreateJournalEntryInput) -> JournalEntry:
        data = await self._request("/journal-entries", "POST", _payload(entry))
        return _unwrap(data, "entry")

    async def get_day_entry(self, date: str) -> DayEntry | None:
        """Day entry for ``date`` (YYYY-MM-DD), or None if nothing was logged."""
        data = await self._request(f"/day-entries/{date}")
        return _unwrap(data, "dayEntry")

    async def list_journal_todos(self, completed: bool | None = None) -> list[JournalTodo]:
        data = await self._request(f"/journal-todos{build_query({'completed': completed})}")
        return _unwrap(data, "todos")

    async def create_journal_todo(self, todo: CreateJournalTodoInput) -> JournalTodo:
        data = await self._request("/journal-todos", "POST", _payload(todo))
        return _unwrap(data, "todo")

    async def update_journal_todo(self, todo_id: str, patch: JournalTodoPatch) -> JournalTodo:
        data = await self._request(f"/journal-todos/{todo_id}", "PATCH", _payload(patch))
        return _unwrap(data, "todo")

    # ---------- Spending ----------

    async def list_spendings(self, filters: SpendingFilters | None = None) -> list[Spending]:
        filters = filters or {}
        qs = build_query(
            {
                "from": filters.get("date_from"),
                "to": filters.get("date_to"),
                "categoryId": filters.get("category_id"),
                "sourceId": filters.get("source_id"),
            }
        )
        data = await self._request(f"/spendings{qs}")
        return _unwrap(data, "spendings")

    async def create_spending(self, spending: CreateSpendingInput) -> Spending:
        data = await self._request("/spendings", "POST", _payload(spending))
        return _unwrap(data, "spending")

    async def delete_spending(self, spending_id: str) -> None:
        await self._request(f"/spendings/{spending_id}", "DELETE")

    async def list_incomes(
        self, date_from: str | None = None, date_to: str | None = None
    ) -> list[Income]:
        qs = build_query({"from": date_from, "to": date_to})
        data = await self._request(f"/incomes{qs}")
        return _unwrap(data, "incomes")

    async def list_spending_categories(self) -> list[Category]:
        data = await self._request("/spending-categories")
        return _unwrap(data, "categories")

    async def list_spending_sources(self) -> list[SpendingSource]:
        data = await self._request("/spending-sources")
        return _unwrap(data, "sources")

    async def get_spending_analytics(self, month: str | None = None) -> SpendingAnalytics | None:
        """Totals for ``month`` (YYYY-MM); the backend defaults to the current month."""
        data = await self._request(f"/spending-analytics{build_query({'month': month})}")
        return _unwrap(data, "analytics")

    # ---------- People ----------

    async def list_people(self, filters: PeopleFilters | None = None) -> list[Person]:
        filters = filters or {}
        qs = build_query(
            {
                "search": filters.get("search"),
                "relationshipTypeId": filters.get("relationship_type_id"),
            }
        )
        data = await self._request(f"/people{qs}")
        return _unwrap(data, "people")

    async def create_person(self, person: CreatePersonInput) -> Person:
        data = await self._request("/people", "POST", _payload(person))
        return _unwrap(data, "person")

    async def add_interaction(
        self, person_id: str, interaction: CreateInteractionInput
    ) -> Interaction:
        data = await self._request(
            f"/people/{person_id}/interactions", "POST", _payload(interaction)
        )
        return _unwrap(data, "interaction")

    # ---------- Exercise ----------

    async def list_workout_sessions(
        self, date_from: str | None = None, date_to: str | None = None
    ) -> list[WorkoutSession]:
        qs = build_query({"from": date_from, "to": date_to})
        data = await self._request(f"/workout-sessions{qs}")
        return _unwrap(data, "sessions")

    async def create_workout_session(self, session: CreateWorkoutSessionInput) -> WorkoutSession:
        data = await self._request("/workout-sessions", "POST", _payload(session))
        return _unwrap(data, "session")

    async def list_workout_templates(self) -> list[WorkoutTemplate]:
        data = await self._request("/workout-templates")
        return _unwrap(data, "templates")

    async def list_exercise_definitions(self) -> list[ExerciseDefinition]:
        data = await self._request("/exercise-definitions")
        return _unwrap(data, "exercises")

    async def get_personal_records(self, exercise_id: str | None = None) -> list[PersonalRecord]:
        data = await self._request(f"/personal-records{build_query({'exerciseId': exercise_id})}")
        return _unwrap(data, "records")

    # ---------- Portfolio ----------

    async def list_investment_transactions(
        self, filters: TransactionFilters | None = None
    ) -> list[InvestmentTransaction]:
        filters = filters or {}
        qs = build_query(
            {
                "assetId": filters.get("asset_id"),
                "type": filters.get("type"),
                "from": filters.get("date_from"),
                "to": filters.get("date_to"),
            }
        )
        data = await self._request(f"/investment-transactions{qs}")
        return _unwrap(data, "transactions")

    async def list_assets(self, asset_type: str | None = None) -> list[Asset]:
        data = await self._request(f"/assets{build_query({'assetType': asset_type})}")
        return _unwrap(data, "assets")

    async def get_asset_price_history(
        self,
        asset_id: str,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> AssetPriceHistory:
        qs = build_query({"from": date_from, "to": date_to})
        data = await self._request(f"/assets/{asset_id}/prices{qs}")
        return {"asset": _unwrap(data, "asset"), "prices": _unwrap(data, "prices")}

    async def get_portfolio_summary(self) -> PortfolioSummary:
        data = await self._request("/portfolio/summary")
        return {"summary": _unwrap(data, "summary"), "holdings": _unwrap(data, "holdings")}
