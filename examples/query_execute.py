from cratedb import sql
import os

with sql.connect(
    os.getenv("CRATEDB_HOSTS", "http://localhost:4200"),
    username=os.getenv("CRATEDB_USER"),
    password=os.getenv("CRATEDB_PASSWORD"),
) as cluster:

    duration, rows = cluster.query("SELECT name, hostname FROM sys.nodes LIMIT 10")
    print(f"query took {duration} ms")

    for row in rows:
        print(row.as_string("name"), row.as_string("hostname"))
