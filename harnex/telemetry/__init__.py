"""Append-only, closed-schema telemetry ledger stored as JSONL, with activity reports."""