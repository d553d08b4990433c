from workforce_ops.database.bootstrap import SCHEMA_PATH, _strip_create_db_and_use, iter_sql_statements


def test_splitter_respects_quotes_and_comments():
    sql = "-- header\nINSERT INTO t VALUES ('a;b');\nSELECT 1;\n"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_schema_declares_daily_unique_keys():
    statements = list(iter_sql_statements(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))))
    joined = "\n".join(statements)

    assert not any(s.upper().startswith(("USE ", "CREATE DATABASE")) for s in statements)
    for table in ("attendance_records", "employee_products", "sales", "attendance_settings", "notifications"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in joined
    assert "(employee_id, work_date)" in joined
    assert "(employee_id, product_id, assigned_at)" in joined
    assert "(employee_id, product_id, sale_date)" in joined
