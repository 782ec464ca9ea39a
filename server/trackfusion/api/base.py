"""
Shared types for the Trackfusion API client.

Payload shapes mirror the JSON the backend sends (camelCase keys). They are
plain dicts at runtime; the TypedDicts only document what each call returns.

Input shapes are ``total=False``: only the keys present in the mapping are
serialized. For update payloads a key mapped to ``None`` is sent as JSON null
("clear this field"), while an absent key leaves the field unchanged.
"""

from dataclasses import dataclass
from typing import Any, Literal, Mapping, TypedDict

HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]

# Any value json.dumps accepts
JSONValue = Any


@dataclass(frozen=True)
class RequestDescriptor:
    """One HTTP exchange against the API. Built fresh for every call."""

    path: str
    method: HttpMethod = "GET"
    body: JSONValue = None
    headers: Mapping[str, str] | None = None


# --- Errors ---


class TrackfusionError(Exception):
    """Base error. ``str(exc)`` is the normalized, caller-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(TrackfusionError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class RequestTimeoutError(TrackfusionError):
    """An attempt exceeded the configured timeout. Never retried."""


class NetworkError(TrackfusionError):
    """The transport failed (connection refused, DNS, ...) on every attempt."""


# --- Projects & tasks ---

TaskStatus = Literal["backlog", "todo", "in-progress", "testing", "done"]
TaskPriority = Literal["low", "medium", "high", "urgent"]


class Tag(TypedDict):
    tagId: str
    name: str
    color: str


class Project(TypedDict, total=False):
    id: str
    name: str
    description: str
    emoji: str
    color: str
    isArchived: bool
    taskCounts: dict[str, int]
    overdueCount: int
    createdAt: str
    updatedAt: str
    lastActivityAt: str


class Task(TypedDict, total=False):
    id: str
    projectId: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    tags: list[Tag]
    order: int
    dueDate: str
    dueDateString: str
    completedAt: str | None
    createdAt: str
    updatedAt: str


class CreateTaskInput(TypedDict, total=False):
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    tags: list[Tag]
    dueDate: str


class TaskPatch(TypedDict, total=False):
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    tags: list[Tag]
    order: int
    dueDate: str | None


# --- Habits ---


class Habit(TypedDict, total=False):
    id: str
    name: str
    emoji: str
    isActive: bool
    goalFrequency: int
    goalPeriod: Literal["day", "week", "month"]
    priority: int
    startDate: str


class CreateHabitInput(TypedDict, total=False):
    name: str
    emoji: str
    goalFrequency: int
    goalPeriod: Literal["day", "week", "month"]
    startDate: str


class HabitToggle(TypedDict):
    toggled: Literal["on", "off"]
    date: str


class HabitAnalytics(TypedDict, total=False):
    currentStreak: int
    longestStreak: int
    completionRate: float
    totalCompletions: int


# --- Items ---


class Item(TypedDict, total=False):
    id: str
    name: str
    categoryId: str
    status: str
    purchaseDate: str
    purchasePrice: float
    currency: str
    notes: str


class CreateItemInput(TypedDict, total=False):
    name: str
    categoryId: str
    purchaseDate: str
    purchasePrice: float
    currency: str
    status: str
    notes: str


class ItemPatch(TypedDict, total=False):
    name: str
    categoryId: str
    status: str
    purchasePrice: float
    notes: str | None


class Category(TypedDict, total=False):
    id: str
    name: str
    emoji: str


# --- Journal ---


class JournalEntry(TypedDict, total=False):
    id: str
    title: str
    content: str
    emoji: str
    mood: str
    createdAt: str


class CreateJournalEntryInput(TypedDict, total=False):
    title: str
    content: str
    emoji: str
    mood: str
    date: str


class DayEntry(TypedDict, total=False):
    id: str
    date: str
    notes: list[Any]


class JournalTodo(TypedDict, total=False):
    id: str
    title: str
    isCompleted: bool
    priority: str
    dueDate: str


class CreateJournalTodoInput(TypedDict, total=False):
    title: str
    priority: str
    dueDate: str


class JournalTodoPatch(TypedDict, total=False):
    title: str
    isCompleted: bool
    priority: str
    dueDate: str | None


# --- Spending ---


class Spending(TypedDict, total=False):
    id: str
    name: str
    description: str
    amount: float
    categoryId: str
    sourceId: str
    date: str


class CreateSpendingInput(TypedDict, total=False):
    description: str
    amount: float
    categoryId: str
    sourceId: str
    date: str


class SpendingFilters(TypedDict, total=False):
    date_from: str
    date_to: str
    category_id: str
    source_id: str


class Income(TypedDict, total=False):
    id: str
    name: str
    income: float
    date: str


class SpendingSource(TypedDict, total=False):
    id: str
    name: str


class SpendingAnalytics(TypedDict, total=False):
    totalSpend: float
    totalIncome: float
    byCategory: dict[str, float]


# --- People ---


class Interaction(TypedDict, total=False):
    id: str
    typeId: str
    typeName: str
    dateString: str
    note: str


class Person(TypedDict, total=False):
    id: str
    name: str
    relationshipTypeId: str
    relationshipTypeName: str
    interactions: list[Interaction]
    connections: list[dict[str, str]]
    lastContactedAt: str


class CreatePersonInput(TypedDict, total=False):
    name: str
    relationshipTypeId: str
    notes: str
    birthday: str


class CreateInteractionInput(TypedDict, total=False):
    typeId: str
    date: str
    note: str


class PeopleFilters(TypedDict, total=False):
    search: str
    relationship_type_id: str


# --- Exercise ---


class WorkoutSet(TypedDict, total=False):
    reps: int
    weight: float


class WorkoutExercise(TypedDict, total=False):
    id: str
    exerciseDefinitionId: str
    exerciseName: str
    sets: list[WorkoutSet]


class WorkoutSession(TypedDict, total=False):
    id: str
    name: str
    dateString: str
    exercises: list[WorkoutExercise]
    totalVolume: float
    durationMinutes: int


class CreateWorkoutSessionInput(TypedDict, total=False):
    date: str
    name: str
    durationMinutes: int
    exercises: list[WorkoutExercise]


class WorkoutTemplate(TypedDict, total=False):
    id: str
    name: str
    exercises: list[WorkoutExercise]


class ExerciseDefinition(TypedDict, total=False):
    id: str
    name: str
    muscleGroups: list[str]


class PersonalRecord(TypedDict, total=False):
    id: str
    exerciseId: str
    exerciseName: str
    type: str
    value: float
    dateString: str


# --- Portfolio ---


class Asset(TypedDict, total=False):
    id: str
    symbol: str
    name: str
    assetType: str


class InvestmentTransaction(TypedDict, total=False):
    id: str
    assetId: str
    type: Literal["buy", "sell"]
    quantity: float
    price: float
    date: str


class TransactionFilters(TypedDict, total=False):
    asset_id: str
    type: str
    date_from: str
    date_to: str


class AssetPrice(TypedDict, total=False):
    id: str
    price: float


class AssetPriceHistory(TypedDict):
    asset: Asset
    prices: list[AssetPrice]


class PortfolioTotals(TypedDict, total=False):
    totalValue: float
    totalInvested: float
    totalPnl: float
    totalPnlPercent: float
    allocationByType: dict[str, float]
    holdingCount: int


class Holding(TypedDict, total=False):
    symbol: str
    assetName: str
    quantity: float
    currentPrice: float
    currentValue: float
    pnl: float
    pnlPercent: float


class PortfolioSummary(TypedDict):
    summary: PortfolioTotals
    holdings: list[Holding]
