#!/usr/bin/env python3
"""
Example: CrateDB SQL Connector behind a proxy

This example demonstrates how to reach a CrateDB cluster through a proxy server:
1. Explicit proxy URL, with basic authentication credentials in the URL
2. Default system proxy behavior (HTTP_PROXY/HTTPS_PROXY/NO_PROXY)

Prerequisites:
- Configure your system proxy settings (HTTP_PROXY/HTTPS_PROXY environment variables)
  or set PROXY_URL
- Set CRATEDB_HOSTS to the cluster node URLs
"""

import os
from cratedb import sql
import logging

# Configure logging to see proxy activity
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Uncomment for detailed debugging (shows HTTP requests/responses)
# logging.getLogger("cratedb.sql").setLevel(logging.DEBUG)
# logging.getLogger("urllib3.connectionpool").setLevel(logging.DEBUG)


def check_proxy_environment():
    """Check if proxy environment variables are configured."""
    proxy_vars = ['HTTP_PROXY', 'HTTPS_PROXY', 'http_proxy', 'https_proxy']
    configured_proxies = {var: os.environ.get(var) for var in proxy_vars if os.environ.get(var)}

    if configured_proxies:
        print("Proxy environment variables found:")
        for var, value in configured_proxies.items():
            # Hide credentials in output
            safe_value = value.split('@')[-1] if '@' in value else value
            print(f"  {var}: {safe_value}")
        return True
    else:
        print("No proxy environment variables found")
        print("  Set HTTP_PROXY and/or HTTPS_PROXY if using a proxy")
        return False


def test_connection(hosts, connection_params, test_name):
    """Run a query through a cluster created with the given parameters."""
    print(f"\n--- Testing {test_name} ---")

    try:
        with sql.connect(hosts, **connection_params) as cluster:
            _, rows = cluster.query("SELECT CURRENT_USER AS user, 1 + 1 AS result")
            row = rows[0]
            print(f"Connected as user: {row.as_string('user')}")
            print(f"Query result: 1 + 1 = {row.as_int('result')}")
        return True

    except sql.exc.Error as e:
        print(f"Connection failed: {e}")
        return False


def main():
    hosts = os.getenv("CRATEDB_HOSTS")
    if not hosts:
        print("Error: Please set CRATEDB_HOSTS")
        return

    check_proxy_environment()

    base_params = {
        "username": os.getenv("CRATEDB_USER"),
        "password": os.getenv("CRATEDB_PASSWORD"),
    }

    results = {}

    # System proxy detection, honouring NO_PROXY per node
    results["system"] = test_connection(hosts, base_params, "System proxy")

    proxy_url = os.getenv("PROXY_URL")
    if proxy_url:
        results["explicit"] = test_connection(
            hosts,
            {**base_params, "proxy": proxy_url, "_proxy_auth_method": "basic"},
            "Explicit proxy with basic auth",
        )

    print("\n--- Summary ---")
    for name, ok in results.items():
        print(f"{name}: {'OK' if ok else 'FAILED'}")


if __name__ == "__main__":
    main()
