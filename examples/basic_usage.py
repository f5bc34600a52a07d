import os
from dataclasses import dataclass
from typing import Optional

from caspystore import NativeObjectStore, Query, connect, disconnect, load_mapping
from caspystore.utils.exceptions import UpdateNotAppliedError
from caspystore.utils.logging import setup_logging


@dataclass
class User:
    id: Optional[str] = None
    name: Optional[str] = None
    age: Optional[int] = None


def main():
    setup_logging("DEBUG")
    connect(contact_points=["127.0.0.1"])
    try:
        mapping = load_mapping(os.path.join(os.path.dirname(__file__), "users.toml"))
        store = NativeObjectStore(User, mapping)

        store.put("u1", User(id="u1", name="Alice", age=31))
        store.put("u2", User(id="u2", name="Bob", age=25))

        print(store.get("u1"))
        print(store.get("u1", ["name"]))

        for key, user in store.execute(Query().filter(age__gt=20).allow_filtering()):
            print(key, user)

        if not store.update_by_query(Query().key("u2").set(age=26)):
            raise UpdateNotAppliedError("u2 não foi atualizado")

        outcome = store.delete_by_query(Query().key("u2"))
        print(f"delete_by_query: success={outcome.success} count={outcome.count}")
    finally:
        disconnect()


if __name__ == "__main__":
    main()
