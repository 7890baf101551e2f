from .metrics import compensation_records, compensation_table, pool_summary

__all__ = ["compensation_records", "compensation_table", "pool_summary"]
