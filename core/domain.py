from dataclasses import asdict, dataclass
from typing import Any, Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

ALL = "all"


def ensure_type(value: str) -> str:
    if value not in TRANSACTION_TYPES:
        raise ValueError(f"Unknown transaction type: {value!r}")
    return value


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str         # "income" | "expense"
    amount: float     # always >= 0, sign comes from type
    date: str         # "2025-01-15"
    category: str     # category name, not id
    description: str = ""

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == INCOME else -self.amount

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            id=str(data["id"]),
            type=ensure_type(data["type"]),
            amount=data["amount"],
            date=data["date"],
            category=data["category"],
            description=data.get("description") or "",
        )


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str
    color: str  # "#42A5F5"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            type=ensure_type(data["type"]),
            color=data["color"],
        )


@dataclass(frozen=True)
class UserProfile:
    first_name: str
    last_name: str
    profession: str = ""
    birth_date: str = ""
    photo_url: str = ""
    middle_name: Optional[str] = None


@dataclass(frozen=True)
class User:
    id: str
    email: str
    password: str
    profile: UserProfile

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=str(data["id"]),
            email=data["email"],
            password=data["password"],
            profile=UserProfile(**data["profile"]),
        )


@dataclass(frozen=True)
class AuthState:
    is_authenticated: bool = False
    user: Optional[User] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "is_authenticated": self.is_authenticated,
            "user": self.user.to_dict() if self.user else None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuthState":
        user = data.get("user")
        return cls(
            is_authenticated=bool(data.get("is_authenticated")),
            user=User.from_dict(user) if user else None,
            error=data.get("error"),
        )


@dataclass(frozen=True)
class Result:
    """Outcome of a CRUD call: either ``value`` or a user-facing ``error``."""

    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "Result":
        return cls(ok=False, error=error)
