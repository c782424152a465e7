"""
Core pipeline: clinical decision layer, batch ingestion and reporting.
"""
