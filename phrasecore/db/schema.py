"""
Defines the DuckDB schema for the phrase store using a SQL string constant.
This keeps the schema definition separate from the connection and
operation logic.
"""

DB_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS phrases (
        position INTEGER NOT NULL,
        id VARCHAR NOT NULL,
        text VARCHAR NOT NULL,
        translation VARCHAR NOT NULL,
        created_at TIMESTAMP NOT NULL,
        success_count INTEGER NOT NULL DEFAULT 0 CHECK (success_count >= 0),
        failure_count INTEGER NOT NULL DEFAULT 0 CHECK (failure_count >= 0)
    );

    CREATE TABLE IF NOT EXISTS store_meta (
        key VARCHAR PRIMARY KEY,
        value BIGINT NOT NULL
    );

    INSERT INTO store_meta (key, value) VALUES ('revision', 0)
        ON CONFLICT DO NOTHING;

    CREATE INDEX IF NOT EXISTS idx_phrases_position ON phrases (position);
"""
