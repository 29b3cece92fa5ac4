"""
Persistence adapters.

json_storage keeps the local JSON blobs, sql_repository talks to the remote
database, and backends maps both onto the canonical entities the services use.
"""
