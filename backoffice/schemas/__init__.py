"""
Back Office Reporting - Schemas Package

Pydantic schemas for API responses.
"""
