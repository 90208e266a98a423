from cratedb import sql
import os

with sql.connect(
    os.getenv("CRATEDB_HOSTS", "http://localhost:4200"),
    username=os.getenv("CRATEDB_USER"),
    password=os.getenv("CRATEDB_PASSWORD"),
) as cluster:

    cluster.query("CREATE TABLE IF NOT EXISTS squares (x int, x_squared int)")

    squares = [[i, i * i] for i in range(100)]
    _, rowcounts = cluster.bulk_query(
        "INSERT INTO squares (x, x_squared) VALUES (?, ?)", squares
    )
    print(f"inserted {sum(rowcounts)} rows")

    cluster.query("REFRESH TABLE squares")
    _, rows = cluster.query("SELECT * FROM squares ORDER BY x LIMIT 10")

    print(rows.to_pandas())
