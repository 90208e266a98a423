from cratedb import sql
import os
import logging


logger = logging.getLogger("cratedb.sql")
logger.setLevel(logging.DEBUG)
fh = logging.FileHandler("pysqllogs.log")
fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(process)d %(thread)d %(message)s"))
fh.setLevel(logging.DEBUG)
logger.addHandler(fh)

with sql.connect(
    os.getenv("CRATEDB_HOSTS", "http://localhost:4200"),
    username=os.getenv("CRATEDB_USER"),
    password=os.getenv("CRATEDB_PASSWORD"),
    load_balancing="round_robin",
) as cluster:

    print("executing query: SELECT * FROM sys.summits LIMIT 100")
    try:
        duration, rows = cluster.query("SELECT * FROM sys.summits LIMIT 100")
        for row in rows:
            print(f"row: {row}")
    except sql.exc.TransportError as e:
        print(f"error: {e}")
