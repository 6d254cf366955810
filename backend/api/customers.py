from typing import Any

from litestar import Controller, get
from litestar.datastructures import State

import core.db as db


class CustomersController(Controller):
    path = "/api/customers"
    tags = ["customers"]

    @get()
    async def list_customers(self, state: State) -> list[dict[str, Any]]:
        """Return the rowset of the configured stored procedure as-is."""
        database = state.config.database
        return await db.call_procedure(
            state.get("pool"),
            database.procedure,
            timeout=float(database.connect_timeout),
        )
