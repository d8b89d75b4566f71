"""
Test data generators for mapping benchmarks.

Each generator returns JSON text together with the type it maps onto:
- small and large documents read into dataclasses
- mixed arrays read into generic nodes
- recursive structures read into self-referencing dataclasses
- string-heavy content with escape sequences
"""

import json
import random
import string
from dataclasses import dataclass
from dataclasses import field
from typing import Any

_ESCAPE_PROBABILITY = 0.3

random.seed(1234)


@dataclass
class Address:
    street: str = ""
    city: str = ""
    zip: str = ""
    country: str = ""


@dataclass
class User:
    id: int = 0
    name: str = ""
    email: str = ""
    active: bool = False
    balance: float = 0.0
    address: Address | None = None


@dataclass
class Transaction:
    id: str = ""
    amount: float = 0.0
    currency: str = ""
    status: str = ""


@dataclass
class Statement:
    user: User = field(default_factory=User)
    transactions: list[Transaction] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class TreeNode:
    level: int = 0
    data: str = ""
    items: list["TreeNode"] = field(default_factory=list)


@dataclass
class Messages:
    strings: list[str] = field(default_factory=list)
    paths: dict[str, str] = field(default_factory=dict)


def generate_test_data(data_type: str) -> tuple[str, Any]:
    """Generates JSON text and its target type for ``data_type``."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def _user(index: int) -> dict[str, Any]:
    return {
        "id": index,
        "name": _random_string(12),
        "email": f"{_random_string(8)}@example.com",
        "active": random.choice([True, False]),
        "balance": round(random.uniform(0.0, 10000.0), 2),
        "address": {
            "street": f"{random.randint(1, 9999)} {_random_string(8)} St",
            "city": _random_string(10),
            "zip": f"{random.randint(10000, 99999)}",
            "country": "US",
        },
    }


def _generate_small_object() -> tuple[str, Any]:
    return json.dumps(_user(12345)), User


def _generate_large_object() -> tuple[str, Any]:
    data = {
        "user": _user(1),
        "transactions": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(random.uniform(1.0, 1000.0), 2),
                "currency": random.choice(["USD", "EUR", "GBP", "JPY"]),
                "status": random.choice(["completed", "pending", "failed"]),
            }
            for i in range(200)
        ],
        "labels": {f"label_{i}": _random_string(6) for i in range(20)},
    }
    return json.dumps(data), Statement


def _generate_mixed_array() -> tuple[str, Any]:
    array: list[Any] = []
    for i in range(200):
        array.append(
            random.choice(
                [
                    random.randint(-1000, 1000),
                    round(random.uniform(-100.0, 100.0), 3),
                    _random_string(random.randint(5, 30)),
                    random.choice([True, False]),
                    None,
                    {"index": i, "value": _random_string(10)},
                ]
            )
        )
    return json.dumps(array), list[Any]


def _generate_nested_structure() -> tuple[str, Any]:
    def create_node(depth: int) -> dict[str, Any]:
        return {
            "level": depth,
            "data": _random_string(15),
            "items": [create_node(depth - 1) for _ in range(3)] if depth else [],
        }

    return json.dumps(create_node(6)), TreeNode


def _generate_string_heavy() -> tuple[str, Any]:
    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(random.choice(['"', "\\", "/", "\b", "\f", "\n", "\t"]))
            else:
                chars.append(random.choice(string.ascii_letters + " é"))
        return "".join(chars)

    data = {
        "strings": [create_escaped_string() for _ in range(100)],
        "paths": {
            f"key_{i}": f"C:\\Users\\{_random_string(8)}\\file_{i}.txt"
            for i in range(20)
        },
    }
    return json.dumps(data), Messages


def build_statement(data: dict[str, Any]) -> Statement:
    """Builds a ``Statement`` by hand from an already decoded document."""
    user = dict(data["user"])
    address = user.pop("address")
    return Statement(
        user=User(**user, address=Address(**address) if address else None),
        transactions=[Transaction(**txn) for txn in data["transactions"]],
        labels=dict(data["labels"]),
    )


def _random_string(length: int) -> str:
    return "".join(random.choices(string.ascii_letters, k=length))
