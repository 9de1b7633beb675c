"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Tenant-scoped database queries.
Each repository extends BaseRepository and adds the queries its service
needs; soft-deleted staff members are filtered out by the session hook in
app.database.
"""
