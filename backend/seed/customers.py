"""Seed data for the sample customers table and its stored procedure."""

from psycopg import sql


# Column names must match the accessors used by the table UI
SAMPLE_CUSTOMERS = [
    {"name": "Alice Johnson", "age": 34, "occupation": "Engineer"},
    {"name": "Bob Martinez", "age": 45, "occupation": "Accountant"},
    {"name": "Carla Nguyen", "age": 29, "occupation": "Designer"},
    {"name": "David Okafor", "age": 52, "occupation": "Physician"},
    {"name": "Elena Petrova", "age": 38, "occupation": "Teacher"},
    {"name": "Farid Haddad", "age": 41, "occupation": "Pharmacist"},
]


def sql_create_customers() -> str:
    return """
        CREATE TABLE IF NOT EXISTS customers (
            id serial PRIMARY KEY,
            name text NOT NULL UNIQUE,
            age integer,
            occupation text
        )
    """


def sql_create_procedure(procedure: str) -> sql.Composed:
    """Zero-argument function returning the customers rowset."""
    return sql.SQL(
        """
        CREATE OR REPLACE FUNCTION {}()
        RETURNS TABLE ("Name" text, "Age" integer, "Occupation" text)
        LANGUAGE sql STABLE
        AS $$
            SELECT name, age, occupation FROM customers ORDER BY id
        $$
        """
    ).format(sql.Identifier(*procedure.split(".")))


async def seed_customers(conn, procedure: str) -> None:
    """Create the customers table, sample rows and the stored procedure."""
    async with conn.cursor() as cur:
        await cur.execute(sql_create_customers())

        for customer in SAMPLE_CUSTOMERS:
            await cur.execute(
                """
                INSERT INTO customers (name, age, occupation)
                VALUES (%(name)s, %(age)s, %(occupation)s)
                ON CONFLICT (name) DO NOTHING
                """,
                customer,
            )
            if cur.rowcount:
                print(f"Created customer: {customer['name']}")
            else:
                print(f"Customer already exists: {customer['name']}")

        await cur.execute(sql_create_procedure(procedure))
        print(f"Created procedure: {procedure}")


async def clear_customers(conn, procedure: str) -> None:
    """Remove the stored procedure and seeded customers."""
    async with conn.cursor() as cur:
        await cur.execute(
            sql.SQL("DROP FUNCTION IF EXISTS {}()").format(
                sql.Identifier(*procedure.split("."))
            )
        )
        print(f"Dropped procedure: {procedure}")

        await cur.execute(
            "DELETE FROM customers WHERE name = ANY(%(names)s)",
            {"names": [c["name"] for c in SAMPLE_CUSTOMERS]},
        )
        print("Cleared seeded customers")
