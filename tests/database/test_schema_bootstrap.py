from pathlib import Path

from src.school_attendance.school_attendance.database.bootstrap import schema_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_schema_file_splits_into_table_statements():
    statements = schema_statements(SCHEMA.read_text(encoding="utf-8"))

    assert len(statements) == 3
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    assert "uq_attendance_student_date_subject" in statements[1]


def test_database_selection_lines_are_dropped():
    sql = "-- header\nCREATE DATABASE IF NOT EXISTS other;\nUSE other;\nCREATE TABLE t (id INT);\n"

    assert schema_statements(sql) == ["CREATE TABLE t (id INT)"]
