from typing import Iterable, List, Optional

from budget_oracle.models.records import Category, Goal, RecordBundle, TransactionRecord


class RecordStore:
    """
    Read-only view over a user's records. The real record store owns the CRUD
    lifecycle; this class only exposes the collections and aggregate getters
    the snapshot builder consumes.
    """

    def __init__(
        self,
        incomes: Optional[Iterable[TransactionRecord]] = None,
        expenses: Optional[Iterable[TransactionRecord]] = None,
        goals: Optional[Iterable[Goal]] = None,
        categories: Optional[Iterable[Category]] = None,
    ) -> None:
        self.incomes: List[TransactionRecord] = list(incomes or [])
        self.expenses: List[TransactionRecord] = list(expenses or [])
        self.goals: List[Goal] = list(goals or [])
        self.categories: List[Category] = list(categories or [])

    @classmethod
    def from_bundle(cls, bundle: RecordBundle) -> "RecordStore":
        return cls(bundle.incomes, bundle.expenses, bundle.goals, bundle.categories)

    def total_income(self) -> float:
        return sum(i.amount for i in self.incomes if i.status == "completed")

    def total_expenses(self) -> float:
        return sum(e.amount for e in self.expenses if e.status == "completed")

    def active_goals(self) -> List[Goal]:
        return [g for g in self.goals if g.status == "active"]
