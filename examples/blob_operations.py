"""
This example demonstrates how to store, fetch, list and delete BLOBs in a CrateDB blob table.
"""

from cratedb import sql
import io
import os

hosts = os.getenv("CRATEDB_HOSTS", "http://localhost:4200")
bucket = os.getenv("CRATEDB_BLOB_TABLE", "myblobs")

with sql.connect(
    hosts,
    username=os.getenv("CRATEDB_USER"),
    password=os.getenv("CRATEDB_PASSWORD"),
) as cluster:

    cluster.query(f"CREATE BLOB TABLE IF NOT EXISTS {bucket}")

    # Upload: the blob is addressed by the SHA-1 digest of its content
    blob_ref = cluster.put(bucket, io.BytesIO(b"Hello, CrateDB!"))
    print(f"Uploaded {blob_ref}")

    # Upload a file without reading it into memory
    # with open("image.png", "rb") as f:
    #     cluster.put(bucket, f)

    stream = cluster.get(blob_ref)
    try:
        print(f"Fetched content: {stream.read()!r}")
    finally:
        stream.close()

    cluster.query(f"REFRESH TABLE blob.{bucket}")
    for ref in cluster.list(bucket):
        print(f"Stored blob: {ref.hex_digest}")

    cluster.delete(blob_ref)
    print(f"Deleted {blob_ref}")

    try:
        cluster.get(blob_ref)
    except sql.exc.BlobActionError as e:
        print(f"Fetching the deleted blob failed as expected: {e}")
